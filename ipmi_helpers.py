"""Helper functions for classifying ipmitool output."""

import logging
from typing import Dict, Optional, Tuple

from errors import PowerCommandError
from models import CommandResult, PowerAction, PowerError, PowerStatus

logger = logging.getLogger(__name__)

# Checked in order; the first phrase found in stderr decides.
STDERR_ERRORS: Tuple[Tuple[Tuple[str, ...], PowerError], ...] = (
    (("Command not supported in present state",), PowerError.COMMAND_NOT_SUPPORTED),
    (("Invalid user name", "authentication failure"), PowerError.AUTHENTICATION_FAILED),
    (("Unable to establish IPMI v2 / RMCP+ session",), PowerError.CONNECTION_FAILED),
    (("Invalid command",), PowerError.INVALID_STATE),
)

STDOUT_STATUSES: Dict[str, PowerStatus] = {
    # power status
    "Chassis Power is on": PowerStatus.ON,
    "Chassis Power is off": PowerStatus.OFF,
    # power on/off/reset/cycle/soft
    "Chassis Power Control: Up/On": PowerStatus.ON,
    "Chassis Power Control: On": PowerStatus.ON,
    "Chassis Power Control: Down/Off": PowerStatus.OFF,
    "Chassis Power Control: Off": PowerStatus.OFF,
    "Chassis Power Control: Soft": PowerStatus.OFF,
    "Chassis Power Control: Reset": PowerStatus.RESET,
    "Chassis Power Control: Cycle": PowerStatus.CYCLE,
}


def classify_stderr(stderr: str) -> PowerError:
    """Map the stderr of a failed run to a PowerError."""
    for phrases, error in STDERR_ERRORS:
        if any(p in stderr for p in phrases):
            return error
    return PowerError.UNKNOWN_ERROR


def parse_power_output(stdout: str) -> Optional[PowerStatus]:
    """Exact match of the trimmed stdout against known ipmitool phrases."""
    return STDOUT_STATUSES.get(stdout.strip())


def classify_result(result: CommandResult, action: Optional[PowerAction] = None) -> PowerStatus:
    """
    Turn a raw ipmitool result into a PowerStatus.

    Raises PowerCommandError when the run failed or printed something
    outside the known vocabulary. The offending text is logged, never
    carried into the error message.
    """
    requested = action.value if action else "?"

    if not result.exit_succeeded:
        error = classify_stderr(result.stderr)
        logger.error(
            f"ipmitool power {requested} failed (exit {result.returncode}): {result.stderr.strip()}"
        )
        raise PowerCommandError(error, detail=result.stderr.strip())

    status = parse_power_output(result.stdout)
    if status is None:
        output = result.stdout.strip()
        logger.warning(f"Unexpected output from ipmitool: '{output}'")
        raise PowerCommandError(PowerError.UNEXPECTED_OUTPUT, detail=output)
    return status
