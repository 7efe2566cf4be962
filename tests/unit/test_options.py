"""
Tests for adapter options and URL creation.
"""
import pytest
from dbadapter.options import AdapterOptions, create_url_from_options
from dbadapter.options import load_options


def test_load_options_from_mapping_and_keywords():
    options = load_options({'drivername': 'sqlite', 'database': 'a.db'}, database='b.db', timeout=5)
    assert options.drivername == 'sqlite'
    assert options.database == 'b.db'
    assert options.timeout == 5
    assert options.pool_max_connections == 5


def test_load_options_returns_instance_unchanged():
    options = AdapterOptions(drivername='sqlite', database=':memory:')
    assert load_options(options) is options

    updated = load_options(options, appname='worker')
    assert updated is not options
    assert updated.appname == 'worker'
    assert updated.database == ':memory:'


def test_load_options_rejects_unknown_keys():
    with pytest.raises(ValueError, match='Unknown adapter options'):
        load_options({'drivername': 'sqlite', 'database': 'a.db', 'hostnme': 'x'})


def test_invalid_driver():
    with pytest.raises(ValueError, match='drivername must be one of'):
        AdapterOptions(drivername='oracle', database='x')


def test_sqlite_requires_database():
    with pytest.raises(ValueError, match='database'):
        AdapterOptions(drivername='sqlite')


@pytest.mark.parametrize('values', [
    {'database': 'app'},
    {'hostname': 'db.local'},
    {},
])
def test_postgresql_requires_host_and_database(values):
    with pytest.raises(ValueError, match='Missing required postgresql options'):
        AdapterOptions(drivername='postgresql', **values)


def test_pool_size_must_be_positive():
    with pytest.raises(ValueError, match='pool_max_connections'):
        AdapterOptions(drivername='sqlite', database=':memory:', pool_max_connections=0)


def test_appname_defaults():
    options = AdapterOptions(drivername='sqlite', database=':memory:')
    assert options.appname


def test_sqlite_url():
    url = create_url_from_options(AdapterOptions(drivername='sqlite', database='/tmp/x.db'))
    assert url.drivername == 'sqlite'
    assert url.database == '/tmp/x.db'


def test_postgresql_url():
    options = AdapterOptions(drivername='postgresql', hostname='db.local', port=6543,
                             username='me', password='secret', database='app',
                             appname='tests', timeout=10)
    url = create_url_from_options(options)
    assert url.drivername == 'postgresql+psycopg'
    assert url.host == 'db.local'
    assert url.port == 6543
    assert url.username == 'me'
    assert url.password == 'secret'
    assert url.database == 'app'
    assert url.query == {'application_name': 'tests', 'connect_timeout': '10'}


def test_postgresql_url_defaults():
    options = AdapterOptions(hostname='db.local', database='app', appname='tests')
    url = create_url_from_options(options)
    assert url.port is None
    assert url.query == {'application_name': 'tests'}


if __name__ == '__main__':
    __import__('pytest').main([__file__])
