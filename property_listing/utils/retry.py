from functools import wraps
from structlog import get_logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

logger = get_logger()

def retry_api(tries: int = 3, delay: float = 0.2, backoff: float = 2, retry_on: tuple = (Exception,)):
    """Retries an async call on ``retry_on`` errors; the last error is re-raised as-is."""
    def decorator(func):
        @wraps(func)
        @retry(
            stop=stop_after_attempt(tries),
            wait=wait_exponential(multiplier=delay, exp_base=backoff),
            retry=retry_if_exception_type(retry_on),
            reraise=True,
        )
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except retry_on as e:
                logger.warning("retry_attempt", func=func.__name__, error=str(e))
                raise
        return wrapper
    return decorator
