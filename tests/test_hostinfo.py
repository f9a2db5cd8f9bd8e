import io

from connscan import hostinfo


class TTY(io.StringIO):
    def isatty(self):
        return True


def test_labels_never_empty():
    assert hostinfo.os_name()
    assert hostinfo.hostname()
    assert hostinfo.machine_type()


def test_hostname_falls_back(monkeypatch):
    def broken():
        raise OSError("no hostname")

    monkeypatch.setattr(hostinfo.socket, "gethostname", broken)
    assert hostinfo.hostname() == "Unknown"


def test_machine_type_falls_back_to_os(monkeypatch):
    monkeypatch.setattr(hostinfo.platform, "machine", lambda: "")
    assert hostinfo.machine_type() == hostinfo.os_name()


def test_supports_ansi(monkeypatch):
    monkeypatch.setenv("TERM", "xterm-256color")
    assert hostinfo.supports_ansi(TTY())
    assert not hostinfo.supports_ansi(io.StringIO())

    monkeypatch.setenv("TERM", "dumb")
    assert not hostinfo.supports_ansi(TTY())

    monkeypatch.delenv("TERM")
    assert not hostinfo.supports_ansi(TTY())
