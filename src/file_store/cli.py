# cli.py
import logging

import click
import uvicorn

from file_store.config.settings import Settings
from file_store.main import create_app

# Configure logging
logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
def cli():
    """CLI commands for the file store server"""
    pass


@cli.command()
@click.option("--host", default=None, help="Address to listen on (default 0.0.0.0)")
@click.option("--port", type=int, default=None, help="Port to listen on (default 8080)")
@click.option("--storage-dir", default=None, help="Directory holding stored files")
@click.option("--max-upload-bytes", type=int, default=None, help="Largest accepted request body")
@click.option("--storage-backend",
              type=click.Choice(["local", "memory", "s3"]),
              default=None,
              help="Where files are stored")
def serve(host, port, storage_dir, max_upload_bytes, storage_backend):
    """Run the HTTP server"""
    overrides = {
        "host": host,
        "port": port,
        "storage_dir": storage_dir,
        "max_upload_bytes": max_upload_bytes,
        "storage_backend": storage_backend,
    }
    settings = Settings(**{key: value for key, value in overrides.items() if value is not None})

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    logger.info("Server starting at %s:%s", settings.host, settings.port)

    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


@cli.command()
def show_config():
    """Show current configuration"""
    settings = Settings()

    print("Current Configuration:")
    for label, value in settings.as_display_dict().items():
        print(f"  {label}: {value}")


if __name__ == "__main__":
    cli()
