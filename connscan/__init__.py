from .models import ProbeResult, ScanSpec
from .scanner import ScanEngine, ScanError, probe_port
from .validation import ValidationError

__version__ = "0.1.0"
