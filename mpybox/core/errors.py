"""Exception hierarchy for mpybox.

Every error raised by the provisioning core derives from ``MpyboxError`` so
the CLI can map failures to exit codes in a single place.
"""


class MpyboxError(Exception):
    """Base class for all mpybox errors."""


class ConfigError(MpyboxError):
    """Invalid or incomplete configuration."""


class UnknownChipFamilyError(ConfigError):
    """The configuration names a chip family mpybox cannot provision."""

    def __init__(self, chip: str) -> None:
        self.chip = chip
        super().__init__(f"Unknown chip family: {chip!r}")


class ProcessError(MpyboxError):
    """An external tool could not complete the requested action."""

    def __init__(self, message: str, tool: str = "", action: str = "") -> None:
        self.tool = tool
        self.action = action
        super().__init__(message)


class LaunchFailureError(ProcessError):
    """The external tool could not be started at all."""

    def __init__(self, executable: str, reason: str, tool: str = "") -> None:
        self.executable = executable
        self.reason = reason
        super().__init__(
            f"Failed to launch {executable}: {reason}", tool=tool, action="launch"
        )


class NonZeroExitError(ProcessError):
    """The external tool ran but reported failure."""

    def __init__(
        self, tool: str, action: str, return_code: int, message: str = ""
    ) -> None:
        self.return_code = return_code
        super().__init__(
            message or f"{tool} failed to {action} (exit code {return_code})",
            tool=tool,
            action=action,
        )


class ProcessTimeoutError(NonZeroExitError):
    """The external tool did not exit within the configured timeout."""

    def __init__(self, tool: str, action: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(
            tool,
            action,
            return_code=-1,
            message=f"{tool} did not {action} within {timeout:g}s",
        )


class ProtocolParseError(MpyboxError):
    """Output of a board query could not be interpreted."""

    def __init__(self, command: str, output: str, reason: str = "") -> None:
        self.command = command
        self.output = output
        message = f"Could not parse '{command}' output: {output!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class FlashError(MpyboxError):
    """Firmware could not be written to the board."""


class FirmwareNotFoundError(FlashError):
    """The firmware image to flash does not exist."""

    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(f"Firmware image not found: {path}")


class UploadError(MpyboxError):
    """A file could not be written to the board's filesystem."""

    def __init__(self, file: object, cause: Exception | None = None) -> None:
        self.file = file
        self.cause = cause
        message = f"Failed to write {file}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
