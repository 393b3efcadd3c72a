"""Studio creation flow: Editing -> Validating -> Uploading -> Submitting -> Done."""
import logging
from typing import Optional

from ..errors import MuroomError, UploadIncompleteError
from ..forms import StudioForm
from ..protocols import IStudioGateway
from .builder import CompositeSubmissionBuilder
from .coordinator import UploadCoordinator
from .models import FlowState, SubmissionReceipt, UploadBatchResult

logger = logging.getLogger(__name__)


class StudioCreationFlow:
    """
    Drives one studio form from validation to creation.

    Any failure while validating, uploading or submitting returns the flow
    to EDITING so the operator can fix the input and submit again. Files
    uploaded before a failed submission stay in storage and are reused on
    the next attempt; the payload is never resent automatically.

    Usage:
        flow = StudioCreationFlow(repository, coordinator)
        receipt = await flow.submit(form)
    """

    def __init__(
        self,
        gateway: IStudioGateway,
        coordinator: UploadCoordinator,
        builder: Optional[CompositeSubmissionBuilder] = None,
    ):
        self._gateway = gateway
        self._coordinator = coordinator
        self._builder = builder or CompositeSubmissionBuilder()
        self._state = FlowState.EDITING
        self.last_batch: Optional[UploadBatchResult] = None

    @property
    def state(self) -> FlowState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state in (FlowState.VALIDATING, FlowState.UPLOADING, FlowState.SUBMITTING)

    def _enter(self, state: FlowState) -> None:
        logger.debug(f"Studio flow: {self._state.value} -> {state.value}")
        self._state = state

    def reset(self, form: Optional[StudioForm] = None) -> None:
        """Return to EDITING, discarding the form's selected files."""
        if self.busy:
            raise RuntimeError(f"cannot reset while {self._state.value}")
        if form is not None:
            form.uploads.reset()
        self.last_batch = None
        self._enter(FlowState.EDITING)

    async def submit(self, form: StudioForm) -> SubmissionReceipt:
        """
        Validate, upload and submit a studio form.

        Raises:
            ValidationError: form incomplete; nothing was sent
            UploadIncompleteError: one or more files failed to upload
            SubmissionError: the create endpoint rejected the payload
        """
        if self._state != FlowState.EDITING:
            raise RuntimeError(f"cannot submit while {self._state.value}")

        try:
            self._enter(FlowState.VALIDATING)
            self._builder.validate(form)

            self._enter(FlowState.UPLOADING)
            self.last_batch = await self._coordinator.upload_all(form.uploads)
            if not self.last_batch.all_success:
                raise UploadIncompleteError(self.last_batch.failed)

            self._enter(FlowState.SUBMITTING)
            payload = self._builder.build(form)
            response = await self._gateway.create_studio(payload)
        except MuroomError as exc:
            logger.warning(f"Studio submission stopped while {self._state.value}: {exc}")
            self._enter(FlowState.EDITING)
            raise
        except BaseException:
            self._enter(FlowState.EDITING)
            raise

        self._enter(FlowState.DONE)
        logger.info(f"Studio '{form.studio_name}' created")
        return SubmissionReceipt(payload=payload, response=response)
