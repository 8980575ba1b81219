import uvicorn
import logging

from contractsmith.config import load_config

# Only show ERROR and CRITICAL from uvicorn; pipeline logging goes through contractsmith.logger
uvicorn_loggers = [
    logging.getLogger("uvicorn"),
    logging.getLogger("uvicorn.error"),
    logging.getLogger("uvicorn.access"),
    logging.getLogger("uvicorn.asgi"),
]

for uvicorn_logger in uvicorn_loggers:
    uvicorn_logger.setLevel(logging.ERROR)
    # Remove handlers to prevent duplicate output
    uvicorn_logger.handlers = []

# [service] host/port, overridden by CONTRACTSMITH_HOST / CONTRACTSMITH_PORT
config = load_config()
config.validate()

if __name__ == "__main__":
    uvicorn.run(
        "contractsmith.api.main:app",
        host=config.service.host,
        port=config.service.port,
        reload=False,
        access_log=False,
        log_config=None
    )
