import logging

import uvicorn

import config
from utils.logging_config import setup_logging, silence_sql_loggers

setup_logging()

# Imported after logging is configured, importing db creates the engine
from app import create_app

silence_sql_loggers()
logging.info("SQL loggers silenced (aiosqlite, sqlalchemy.*)")

app = create_app()

if __name__ == '__main__':
    uvicorn.run(app, host=config.WEBAPP_HOST, port=config.WEBAPP_PORT)
