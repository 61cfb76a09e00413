import logging
import sys


def setup_logging(level: int = logging.INFO):
    '''Configure root logger for the whole package.'''
    logging.basicConfig(
        level=level,  # Min level to show: DEBUG<INFO<WARNING<ERROR<CRITICAL
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # psycopg is chatty at DEBUG
    logging.getLogger('psycopg').setLevel(max(level, logging.INFO))
