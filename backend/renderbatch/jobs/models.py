"""
Render job data models.

A RenderJob is one unit of render work: a composition, where to write it,
which output module template to apply and what to do after the render.

Template and post-render action are late-bound. A job created without them
keeps them unresolved until the scheduler dispatches it, at which point the
scheduler's CURRENT defaults are substituted.
"""

import uuid
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class PostRenderAction(str, Enum):
    """
    What happens to the source material after a successful render.

    Closed set. Host bindings translate these to host constants.
    """

    NONE = "none"
    IMPORT = "import"  # Import the rendered file into the project
    IMPORT_AND_REPLACE = "import_and_replace"  # Import and replace usages of the composition
    SET_PROXY = "set_proxy"  # Use the rendered file as the composition's proxy


class RenderJob(BaseModel):
    """
    A single render job.

    Frozen once created. Resolution returns a new job rather than
    mutating this one.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    # Identity
    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])

    # Host composition reference (opaque to this layer)
    composition: Any

    output_path: str

    # None or "" means "use the scheduler default"
    output_template: Optional[str] = None

    # None means "use the scheduler default"
    post_render_action: Optional[PostRenderAction] = None

    @property
    def is_resolved(self) -> bool:
        """True once both template and post-render action are set."""
        return self.output_template is not None and self.post_render_action is not None

    @property
    def uses_default_template(self) -> bool:
        return not self.output_template

    def resolve(
        self,
        default_template: Optional[str],
        default_action: Optional[PostRenderAction],
    ) -> "RenderJob":
        """
        Return a copy with unset fields replaced by the given defaults.

        Explicit overrides on this job always win. The copy keeps the
        same id so logs can follow a job through dispatch.

        Args:
            default_template: Template used when this job has none
            default_action: Post-render action used when this job has none

        Returns:
            A new RenderJob (may still be unresolved if a default is None)
        """
        template = default_template if self.uses_default_template else self.output_template
        action = self.post_render_action if self.post_render_action is not None else default_action
        return self.model_copy(
            update={"output_template": template, "post_render_action": action}
        )

    def describe(self) -> str:
        """Short human-readable description for logs."""
        template = self.output_template if self.output_template is not None else "<default>"
        if template == "":
            template = "<host default>"
        name = getattr(self.composition, "name", None) or str(self.composition)
        return f"{self.id} [{name} -> {self.output_path}, template={template}]"
