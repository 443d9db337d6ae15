"""Collection of recoverable warnings raised while normalizing a spec."""

from vlnorm.core.enums import NormalizePhase, WarningCode
from vlnorm.core.errors import StrictModeError
from vlnorm.core.models import Diagnostic
from vlnorm.infra.logging import get_logger

logger = get_logger(__name__)


class Diagnostics:
    """Ordered warning sink for one normalize call.

    In permissive mode warnings are appended and processing continues. In
    strict mode the first warning raises :class:`StrictModeError`.
    """

    def __init__(self, *, strict: bool = False) -> None:
        """Initialize an empty sink.

        Args:
            strict: Raise on the first warning instead of collecting it
        """
        self.strict = strict
        self._warnings: list[Diagnostic] = []

    def warn(
        self,
        code: WarningCode,
        message: str,
        *,
        channel: str | None = None,
        mark: str | None = None,
        phase: NormalizePhase | None = None,
    ) -> Diagnostic:
        """Record a warning.

        Args:
            code: Warning category
            message: Human-readable message
            channel: Encoding channel concerned, if any
            mark: Mark type concerned, if any
            phase: Pipeline phase that detected the problem

        Returns:
            The recorded Diagnostic

        Raises:
            StrictModeError: In strict mode
        """
        diagnostic = Diagnostic(
            code=code,
            message=message,
            channel=channel,
            mark=mark,
            phase=phase.value if phase else None,
        )
        logger.warning(
            message,
            code=code.value,
            channel=channel,
            mark=mark,
            phase=diagnostic.phase,
        )
        if self.strict:
            raise StrictModeError(diagnostic)
        self._warnings.append(diagnostic)
        return diagnostic

    @property
    def warnings(self) -> list[Diagnostic]:
        """Warnings recorded so far, in emission order."""
        return list(self._warnings)

    @property
    def messages(self) -> list[str]:
        """Messages of the recorded warnings."""
        return [w.message for w in self._warnings]

    def __len__(self) -> int:
        return len(self._warnings)
