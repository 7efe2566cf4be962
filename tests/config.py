from dataclasses import dataclass


@dataclass
class PostgresSettings:
    drivername: str = 'postgresql'
    hostname: str = 'localhost'
    username: str = 'postgres'
    password: str = 'postgres'
    database: str = 'test_db'
    port: int = 5432
    timeout: int = 30
    pool_max_connections: int = 2

    def as_options(self) -> dict:
        return dict(self.__dict__)


postgresql = PostgresSettings()
