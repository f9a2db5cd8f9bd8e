from dataclasses import dataclass


@dataclass(frozen=True)
class ScanSpec:
    host: str
    start_port: int
    end_port: int
    timeout_ms: int
    concurrency: int
    verbose: bool = False

    @property
    def port_count(self) -> int:
        return self.end_port - self.start_port + 1

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000.0


@dataclass(frozen=True)
class ProbeResult:
    port: int
    is_open: bool
    elapsed_s: float
