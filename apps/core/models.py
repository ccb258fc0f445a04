import logging

from django.db import models
from django.db.models import F
from django.utils import timezone

from apps.core.exceptions import ConcurrencyError, ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class BaseModel(models.Model):
    """
    An abstract base class that provides created_at and updated_at fields
    """

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class VersionedModel(BaseModel):
    """
    Abstract base for records that move through a status machine.

    Every status write goes through `transition()`, a single conditional
    UPDATE keyed on (pk, version, status). Two participants racing on the
    same record cannot both win: the loser sees either a status that no
    longer allows the move (ConflictError) or a bumped version
    (ConcurrencyError) and has to re-read before trying again.
    """

    version = models.PositiveIntegerField(default=0, editable=False)

    class Meta:
        abstract = True

    def transition(self, from_statuses, to_status, **changes):
        """
        Move `self` from any of `from_statuses` to `to_status`, writing
        `changes` in the same statement. Refreshes `self` on success.
        """
        from_statuses = tuple(from_statuses)
        label = self._meta.verbose_name

        if self.status not in from_statuses:
            raise ConflictError(
                f"Cannot move {label} from '{self.status}' to '{to_status}'."
            )

        updated = (
            type(self)
            ._default_manager.filter(
                pk=self.pk, version=self.version, status__in=from_statuses
            )
            .update(
                status=to_status,
                version=F("version") + 1,
                updated_at=timezone.now(),
                **changes,
            )
        )

        if not updated:
            current = (
                type(self)
                ._default_manager.filter(pk=self.pk)
                .values("status", "version")
                .first()
            )
            if current is None:
                raise NotFoundError(f"{label.capitalize()} not found.")
            if current["status"] not in from_statuses:
                raise ConflictError(
                    f"Cannot move {label} from '{current['status']}' to '{to_status}'."
                )
            logger.warning(
                f"Stale {label} {self.pk}: expected version {self.version}, "
                f"found {current['version']}"
            )
            raise ConcurrencyError(
                f"{label.capitalize()} was modified concurrently, reload and retry."
            )

        self.refresh_from_db()
        return self

    def bump(self, **changes):
        """
        Write non-status `changes` under the same version check as
        `transition()`.
        """
        updated = (
            type(self)
            ._default_manager.filter(pk=self.pk, version=self.version)
            .update(version=F("version") + 1, updated_at=timezone.now(), **changes)
        )
        if not updated:
            raise ConcurrencyError(
                f"{self._meta.verbose_name.capitalize()} was modified concurrently, "
                "reload and retry."
            )
        self.refresh_from_db()
        return self
