from __future__ import annotations

from typing import Sequence

from colorama import Fore, Style

from . import hostinfo


class Printer:
    """Terminal presentation for the CLI. The engine never sees this."""

    def __init__(self, color: bool = True):
        self.color = color

    def _paint(self, text: str, code: str) -> str:
        if not self.color:
            return text
        return f"{code}{text}{Style.RESET_ALL}"

    def banner(self) -> None:
        info = f"OS: {hostinfo.os_name()} | Hostname: {hostinfo.hostname()} | Machine: {hostinfo.machine_type()}"
        print(self._paint(info, Style.BRIGHT + Fore.MAGENTA))
        print()

    def prompt(self, text: str) -> str:
        return input(self._paint(text, Style.BRIGHT + Fore.BLUE))

    def scanning(self, host: str, start_port: int, end_port: int) -> None:
        print(self._paint(f"Scanning {host} ports {start_port}-{end_port}...", Style.BRIGHT + Fore.MAGENTA))

    def port_line(self, port: int, is_open: bool) -> None:
        status = "open" if is_open else "closed"
        code = Style.BRIGHT + (Fore.GREEN if is_open else Fore.RED)
        print(f"{port}: {self._paint(status, code)}", flush=True)

    def summary(self, open_ports: Sequence[int]) -> None:
        print()
        print(self._paint("Scan complete.", Style.BRIGHT + Fore.MAGENTA))
        if not open_ports:
            print(self._paint("No open ports found.", Style.BRIGHT + Fore.YELLOW))
            return
        print(self._paint("Open ports:", Style.BRIGHT + Fore.MAGENTA))
        for port in open_ports:
            print(self._paint(str(port), Fore.MAGENTA))

    def error(self, message: str) -> None:
        print(self._paint(f"Error: {message}", Style.BRIGHT + Fore.RED))
