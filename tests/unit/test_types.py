"""
Tests for the canonical result shapes.
"""
import pytest
from dbadapter.types import ColumnType, DriverResult, Field, Query, ResultSet


def test_query_args_become_tuple():
    assert Query('SELECT $1', [1]).args == (1,)
    assert Query('SELECT 1').args == ()
    assert Query('SELECT $1', [1]) == Query('SELECT $1', (1,))


def test_column_type_string_form():
    assert str(ColumnType.INT32) == 'int32'
    assert ColumnType.TEXT_ARRAY == 'text-array'
    assert ColumnType('uuid') is ColumnType.UUID


def test_result_set_width_must_match():
    with pytest.raises(ValueError, match='column names'):
        ResultSet(column_names=['a', 'b'], column_types=[ColumnType.INT32])
    with pytest.raises(ValueError, match='Row 1'):
        ResultSet(column_names=['a'], column_types=[ColumnType.INT32], rows=[[1], [1, 2]])


def test_result_set_to_dataframe():
    result = ResultSet(
        column_names=['id', 'name'],
        column_types=[ColumnType.INT32, ColumnType.TEXT],
        rows=[[1, 'Alice'], [2, 'Bob']],
        )

    df = result.to_dataframe()

    assert len(result) == 2
    assert list(df.columns) == ['id', 'name']
    assert df['name'].tolist() == ['Alice', 'Bob']
    assert df.attrs['column_types'] == {'id': 'int32', 'name': 'text'}


def test_empty_result_set_to_dataframe_keeps_columns():
    result = ResultSet(column_names=['id'], column_types=[ColumnType.INT64])
    df = result.to_dataframe()
    assert df.empty
    assert list(df.columns) == ['id']


def test_driver_result_dict_form():
    result = DriverResult(fields=[Field('a', 23)], rows=[[1]], row_count=1)
    assert DriverResult.from_dict(result.to_dict()) == result
    assert DriverResult.empty() == DriverResult(fields=[], rows=[], row_count=None)


if __name__ == '__main__':
    __import__('pytest').main([__file__])
