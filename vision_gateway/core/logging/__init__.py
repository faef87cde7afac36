from .logger import (
    clear_cycle_id,
    get_cycle_id,
    get_logger,
    set_cycle_id,
    setup_logging,
)

__all__ = [
    "clear_cycle_id",
    "get_cycle_id",
    "get_logger",
    "set_cycle_id",
    "setup_logging",
]
