"""Communication logging module.

Provides structured logging of the exchange between the host and the
sensor shell: detection results, port lifecycle, commands and decoded
readings.
"""

from sensor_shell.logging.log_models import LogEntry
from sensor_shell.logging.file_handler import FileHandler
from sensor_shell.logging.communication_logger import CommunicationLogger

__all__ = ['LogEntry', 'FileHandler', 'CommunicationLogger']
