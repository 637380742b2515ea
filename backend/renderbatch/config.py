"""
renderbatch configuration.

Settings come from explicit arguments or environment variables.
Environment overrides are optional; every setting has a default.
"""

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from .jobs.models import PostRenderAction
from .project.snapshot import DEFAULT_SNAPSHOT_SUFFIX
from .worker.discovery import ENV_AERENDER_PATH
from .worker.process import DEFAULT_FIXED_FLAGS, FailurePolicy


# Environment variable names
ENV_DEFAULT_TEMPLATE = "RENDERBATCH_DEFAULT_TEMPLATE"
ENV_DEFAULT_POST_RENDER_ACTION = "RENDERBATCH_DEFAULT_POST_RENDER_ACTION"
ENV_SNAPSHOT_DIR = "RENDERBATCH_SNAPSHOT_DIR"
ENV_SNAPSHOT_SUFFIX = "RENDERBATCH_SNAPSHOT_SUFFIX"
ENV_FAILURE_POLICY = "RENDERBATCH_FAILURE_POLICY"
ENV_REMOVE_SNAPSHOTS = "RENDERBATCH_REMOVE_SNAPSHOTS"
ENV_VALIDATE_TEMPLATES = "RENDERBATCH_VALIDATE_TEMPLATES"
ENV_FALLBACK_PROJECT_PATH = "RENDERBATCH_FALLBACK_PROJECT_PATH"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class RenderBatchSettings:
    """
    Immutable scheduler and worker configuration.

    default_output_template:
        None  -> jobs must carry their own template
        ""    -> keep the host's default output module
        name  -> apply this output module template
    """

    aerender_path: Optional[str] = None
    worker_flags: List[str] = field(default_factory=lambda: list(DEFAULT_FIXED_FLAGS))
    failure_policy: FailurePolicy = FailurePolicy.ABORT

    default_output_template: Optional[str] = None
    default_post_render_action: PostRenderAction = PostRenderAction.NONE
    validate_templates: bool = False

    snapshot_dir: Optional[str] = None
    snapshot_suffix: str = DEFAULT_SNAPSHOT_SUFFIX
    remove_snapshots: bool = False
    fallback_project_path: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RenderBatchSettings":
        """
        Build settings from environment variables.

        Unset variables keep their defaults.

        Raises:
            ValueError: If a variable holds an unknown enum value
        """
        env = os.environ if environ is None else environ

        failure_policy = FailurePolicy.ABORT
        if env.get(ENV_FAILURE_POLICY):
            failure_policy = FailurePolicy(env[ENV_FAILURE_POLICY].strip().lower())

        post_render_action = PostRenderAction.NONE
        if env.get(ENV_DEFAULT_POST_RENDER_ACTION):
            post_render_action = PostRenderAction(env[ENV_DEFAULT_POST_RENDER_ACTION].strip().lower())

        return cls(
            aerender_path=env.get(ENV_AERENDER_PATH) or None,
            failure_policy=failure_policy,
            # An empty variable is meaningful: keep the host default module
            default_output_template=env.get(ENV_DEFAULT_TEMPLATE),
            default_post_render_action=post_render_action,
            validate_templates=_flag(env.get(ENV_VALIDATE_TEMPLATES)),
            snapshot_dir=env.get(ENV_SNAPSHOT_DIR) or None,
            snapshot_suffix=env.get(ENV_SNAPSHOT_SUFFIX) or DEFAULT_SNAPSHOT_SUFFIX,
            remove_snapshots=_flag(env.get(ENV_REMOVE_SNAPSHOTS)),
            fallback_project_path=env.get(ENV_FALLBACK_PROJECT_PATH) or None,
        )


def _flag(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in _TRUE_VALUES
