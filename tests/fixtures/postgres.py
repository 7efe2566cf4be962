import logging
import pathlib
import sys

import dbadapter as db
import pytest
import pytest_asyncio

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
sys.path.insert(0, str(HERE.parent))
import config

logger = logging.getLogger(__name__)


@pytest.fixture(scope='session')
def psql_docker(request):
    """Session-scoped PostgreSQL container using testcontainers.

    Skips the requesting tests when testcontainers or Docker is unavailable.
    """
    try:
        from testcontainers.postgres import PostgresContainer
    except ImportError:
        pytest.skip('testcontainers is not installed')

    container = PostgresContainer(
        image='postgres:15',
        username=config.postgresql.username,
        password=config.postgresql.password,
        dbname=config.postgresql.database,
    )

    try:
        container.start()
    except Exception as e:
        pytest.skip(f'Cannot start PostgreSQL container: {e}')

    config.postgresql.hostname = container.get_container_host_ip()
    config.postgresql.port = int(container.get_exposed_port(5432))
    logger.info(
        f'PostgreSQL container started at '
        f'{config.postgresql.hostname}:{config.postgresql.port}'
    )

    def finalizer():
        try:
            container.stop()
            logger.info('PostgreSQL container stopped')
        except Exception as e:
            logger.warning(f'Error stopping container: {e}')

    request.addfinalizer(finalizer)
    return container


@pytest_asyncio.fixture
async def pg_adapter(psql_docker):
    """Adapter on the container, closed after the test."""
    adapter = db.connect(config.postgresql.as_options())
    yield adapter
    await adapter.close()
