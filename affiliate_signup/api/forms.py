"""
Form registry - In-memory form instances keyed by opaque id.

Each open form owns its own re-entrancy guard, so two browser tabs get
two independent forms. Instances live in process memory only; they are
not shared across workers.

Capacity is reclaimed when a new form is opened:
- Forms untouched for longer than idle_ttl are cleared and dropped
- If still full, the least recently used finished form (SUCCEEDED/FAILED)
  is cleared and dropped
A form with a submission running is never evicted.
"""

import logging
import time
import uuid
from collections import OrderedDict
from collections.abc import Callable

from affiliate_signup.domain.form import RegistrationForm

logger = logging.getLogger(__name__)


class FormLimitReached(Exception):
    """No capacity left for another open form."""

    pass


class FormRegistry:
    """Holds open RegistrationForm instances, least recently used first."""

    def __init__(
        self,
        form_factory: Callable[[], RegistrationForm],
        max_open: int,
        idle_ttl: float = 900.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._form_factory = form_factory
        self._max_open = max_open
        self._idle_ttl = idle_ttl
        self._clock = clock
        self._forms: OrderedDict[str, RegistrationForm] = OrderedDict()
        self._touched: dict[str, float] = {}

    def open(self) -> tuple[str, RegistrationForm]:
        """
        Create a new form instance, evicting stale forms if needed.

        Raises:
            FormLimitReached: If max_open forms are open and none can be evicted
        """
        if len(self._forms) >= self._max_open:
            self._evict_idle()
        if len(self._forms) >= self._max_open and not self._evict_finished():
            logger.warning("Form limit reached (%d open)", len(self._forms))
            raise FormLimitReached(f"At most {self._max_open} forms may be open")
        form_id = uuid.uuid4().hex
        form = self._form_factory()
        self._forms[form_id] = form
        self._touch(form_id)
        return form_id, form

    def get(self, form_id: str) -> RegistrationForm | None:
        form = self._forms.get(form_id)
        if form is not None:
            self._touch(form_id)
        return form

    def discard(self, form_id: str) -> None:
        """Abandon the form and drop it. Raises FormBusy while submitting."""
        form = self._forms.get(form_id)
        if form is None:
            return
        form.abandon()
        self._drop(form_id)

    def __len__(self) -> int:
        return len(self._forms)

    def _touch(self, form_id: str) -> None:
        self._forms.move_to_end(form_id)
        self._touched[form_id] = self._clock()

    def _evict_idle(self) -> None:
        cutoff = self._clock() - self._idle_ttl
        expired = [
            form_id
            for form_id, form in self._forms.items()
            if self._touched[form_id] <= cutoff and not form.state.is_busy
        ]
        for form_id in expired:
            self.discard(form_id)
        if expired:
            logger.info("Evicted %d idle forms", len(expired))

    def _evict_finished(self) -> bool:
        for form_id, form in self._forms.items():
            if form.state.is_terminal:
                self.discard(form_id)
                logger.info("Evicted finished form %s to make room", form_id)
                return True
        return False

    def _drop(self, form_id: str) -> None:
        del self._forms[form_id]
        del self._touched[form_id]
