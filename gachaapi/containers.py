import random

from dependency_injector import containers, providers

from gachaapi.config import get_settings
from gachaapi.core.weighted_draw import WeightedDrawSelector
from gachaapi.database.connection import create_db_engine, create_session_factory
from gachaapi.providers.commerce.haravan import HaravanClient
from gachaapi.providers.queue.sqs import SQSClient
from gachaapi.services.fulfillment_service import FulfillmentService


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(get_settings)


class DatabaseModule(containers.DeclarativeContainer):
    """Engine and session factory (세션은 요청마다 deps.get_db 에서 생성)"""

    config = providers.DependenciesContainer()

    engine = providers.Singleton(create_db_engine, settings=config.config)
    session_factory = providers.Singleton(create_session_factory, engine=engine)


class ClientModule(containers.DeclarativeContainer):
    """External clients and shared helpers."""

    config = providers.DependenciesContainer()
    database = providers.DependenciesContainer()

    rng = providers.Singleton(random.SystemRandom)
    draw_selector = providers.Singleton(WeightedDrawSelector, rng=rng)
    haravan_client = providers.Singleton(HaravanClient, settings=config.config)
    sqs_client = providers.Singleton(SQSClient, settings=config.config)
    fulfillment_service = providers.Singleton(
        FulfillmentService,
        session_factory=database.session_factory,
        haravan_client=haravan_client,
        settings=config.config,
        sqs_client=sqs_client,
    )


class Container(containers.DeclarativeContainer):
    """Application container."""

    config = providers.Container(ConfigModule)
    database = providers.Container(DatabaseModule, config=config)
    clients = providers.Container(ClientModule, config=config, database=database)
