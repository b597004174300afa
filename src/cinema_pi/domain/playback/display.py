"""HDMI-CEC display power signalling.

Fire-and-forget: commands are piped into cec-client running detached, and a
failure never blocks playback.
"""

import shutil
import subprocess
from typing import Optional

from loguru import logger

from cinema_pi.core.config import DisplayConfig


class DisplayPower:
    """Turns the attached display on and off through cec-client."""

    def __init__(self, config: Optional[DisplayConfig] = None):
        self.config = config or DisplayConfig()

    @property
    def wake_delay(self) -> float:
        return self.config.wake_delay if self.config.enabled else 0.0

    def is_available(self) -> bool:
        return shutil.which(self.config.cec_client) is not None

    def _send(self, cec_command: str) -> bool:
        if not self.config.enabled:
            return False

        try:
            process = subprocess.Popen(
                [self.config.cec_client, "-s", "-d", "1"],
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
            process.stdin.write(f"{cec_command}\n".encode("utf-8"))
            process.stdin.close()
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning(f"Display power command '{cec_command}' failed: {e}")
            return False

        logger.debug(f"Sent CEC '{cec_command}' (pid={process.pid})")
        return True

    def power_on(self) -> bool:
        """Ask the display to wake up. Returns whether the signal was sent."""
        logger.info("Turning display on")
        return self._send(f"on {self.config.device}")

    def power_off(self) -> bool:
        """Ask the display to go to standby. Returns whether the signal was sent."""
        logger.info("Turning display off")
        return self._send(f"standby {self.config.device}")
