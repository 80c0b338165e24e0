from __future__ import annotations


class ProvisionError(RuntimeError):
    """Base error for a failed provisioning action.

    Plain ProvisionError is structural (corrupt directory, failed validation)
    and is never retried.
    """


class RetryableError(ProvisionError):
    """Transient failure; surfaced only after the retry policy is exhausted."""


class PackageInstallError(RetryableError):
    pass


class CloneError(RetryableError):
    pass


class DownloadError(RetryableError):
    pass


class PrereqError(ProvisionError):
    """Missing required tool, unsupported OS or failed pre-flight check."""


class ProvisionWarning(UserWarning):
    """Raised by best-effort actions; reported, never fatal."""


class PermissionWarning(ProvisionWarning):
    pass


class ShellChangeWarning(ProvisionWarning):
    pass
