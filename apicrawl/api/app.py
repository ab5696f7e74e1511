from fastapi import FastAPI

from apicrawl.api.routers import create_crawls_router, create_systems_router


def create_app(container) -> FastAPI:
    """Build the FastAPI application from a wired Container."""
    app = FastAPI(title="apicrawl", description="Hypermedia REST API crawler")
    app.include_router(
        create_systems_router(
            container.config(),
            crawl_registry=container.crawl_registry(),
            default_config=container.default_crawler_config,
        )
    )
    app.include_router(
        create_crawls_router(
            crawl_runner=container.crawl_runner(),
            crawl_registry=container.crawl_registry(),
            crawls_repo=container.crawls_repository(),
            config_file_store=container.config_file_store(),
            result_serializer=container.result_serializer(),
            default_config=container.default_crawler_config,
        )
    )
    return app
