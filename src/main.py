"""
Configuration resolver - bootstrap and effective configuration report.

Wires the override table (PostgreSQL), the volatile layer (Redis), process
environment/system properties and the packaged defaults into one Resolver,
plugs it into the process property chain and reports the effective state.

Usage:
    python -m src.main [-D key=value ...] [--base-file PATH] [key ...]
"""

import argparse
import asyncio
from collections import Counter
from collections.abc import Sequence

from src.cache.client import RedisClient
from src.cache.volatile_store import RedisVolatileStore
from src.config.settings import Settings
from src.database.postgres import PostgresClient
from src.environment.base_config import BaseConfigProvider
from src.environment.process import ProcessEnvironment
from src.environment.property_sources import PropertySources
from src.logger.logger import get_logger, init_logger
from src.logger.postgres_writer import PostgresWriter
from src.logger.types import Category, category, param
from src.repository.override_repository import OverrideRepository
from src.resolver.aggregator import Aggregator
from src.resolver.property_source import OverridePropertySource, register_property_source
from src.resolver.resolver import Resolver
from src.services.configuration_service import ConfigurationService
from src.services.override_administration import OverrideAdministration


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve effective configuration values")
    parser.add_argument(
        "-D",
        dest="defines",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Set a process system property (repeatable)",
    )
    parser.add_argument("--base-file", help="Packaged defaults (YAML), overrides CONFIG_BASE_FILE")
    parser.add_argument("keys", nargs="*", help="Keys to resolve and print")
    return parser.parse_args(argv)


def report(service: ConfigurationService, keys: Sequence[str]) -> None:
    """Log the effective snapshot summary and print requested keys."""
    logger = get_logger().with_category(Category.CONFIGURATION)

    entries = service.aggregator.list_all()
    by_source = Counter(entry.priority.value for entry in entries.values())
    logger.info(
        "Effective configuration snapshot",
        param("keys", len(entries)),
        param("by_source", dict(by_source)),
        param("active_overrides", service.active_override_count()),
        param("categories", service.list_categories()),
    )

    # Key lines go out after all resolution logging, as one block
    results = [service.get_effective_value(key) for key in keys]
    for result in results:
        print(f"{result['key']}={result['value']}")


async def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    settings = Settings()

    log_writer = PostgresWriter(dsn=settings.postgres.dsn, batch_size=100, flush_interval=5.0)
    await log_writer.connect()

    init_logger(
        service_name=settings.service_name,
        environment=settings.environment,
        writer=log_writer,
        level=settings.log_level,
    )
    logger = get_logger()
    logger.info(
        "Starting configuration resolver",
        param("environment", settings.environment),
        param("service_name", settings.service_name),
        param("version", settings.service_version),
    )

    process = ProcessEnvironment()
    process.load_defines(args.defines)

    base_config = BaseConfigProvider.from_file(args.base_file or settings.configuration.base_file)

    postgres_client = PostgresClient(settings.postgres)
    await postgres_client.connect()
    logger.info("Connected to PostgreSQL", category(Category.DATABASE))

    redis_client = RedisClient(settings.redis)
    try:
        override_repository = OverrideRepository(postgres_client)
        if not override_repository.ensure_table_exists():
            logger.warn("Override table unavailable, overrides will be skipped")

        await redis_client.connect()
        logger.info(
            "Connected to Redis",
            category(Category.CACHE),
            param("host", settings.redis.host),
            param("port", settings.redis.port),
        )
        volatile_store = RedisVolatileStore(redis_client)

        property_sources = PropertySources.standard(
            process, base_config, max_depth=settings.configuration.max_lookup_depth
        )
        resolver = Resolver(
            override_repository,
            volatile_store,
            process,
            host=property_sources,
            base_config=base_config,
        )
        register_property_source(property_sources, OverridePropertySource(resolver))

        service = ConfigurationService(
            resolver=resolver,
            aggregator=Aggregator(override_repository, volatile_store, base_config),
            administration=OverrideAdministration(
                override_repository,
                settings.configuration.default_categories,
                settings.configuration.updated_by,
            ),
            volatile_store=volatile_store,
        )

        report(service, args.keys)
    except Exception as e:
        logger.error("Configuration resolver failed", e, param("error", str(e)))
        raise
    finally:
        logger.info("Shutting down configuration resolver...")
        await redis_client.close()
        await postgres_client.close()
        await log_writer.close()


if __name__ == "__main__":
    asyncio.run(main())
