"""Boundary that turns service methods into OperationResult producers."""

import functools
import inspect
import logging

from ...domain.entities.results import ErrorKind, OperationResult
from ...domain.exceptions import AggregationError


def public_operation(name: str):
    """
    Wrap a service method so it always returns an OperationResult.

    Domain errors become tagged failures; anything else becomes an Internal
    failure logged with its traceback. Start, completion and failure are
    logged on the method's module logger.
    """

    def decorator(func):
        logger = logging.getLogger(func.__module__)

        def _failure(error: Exception) -> OperationResult:
            if isinstance(error, AggregationError):
                logger.warning(f"{name} failed: {error.kind.value}: {error}")
                return OperationResult.failure(error.kind, str(error))
            logger.error(f"{name} failed: {error}", exc_info=True)
            return OperationResult.failure(ErrorKind.INTERNAL, str(error))

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs) -> OperationResult:
                logger.info(f"{name}: started")
                try:
                    value = await func(*args, **kwargs)
                except Exception as e:
                    return _failure(e)
                logger.info(f"{name}: completed")
                return OperationResult.success(value)

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> OperationResult:
            logger.info(f"{name}: started")
            try:
                value = func(*args, **kwargs)
            except Exception as e:
                return _failure(e)
            logger.info(f"{name}: completed")
            return OperationResult.success(value)

        return wrapper

    return decorator
