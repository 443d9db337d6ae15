"""vlnorm: normalization and composite-mark expansion for declarative visualization specs."""

from vlnorm.compile.stack import assemble_stack_transforms, compute_stack_properties, stack_transform
from vlnorm.compositemark import CompositeMarkRegistry, default_registry
from vlnorm.core.config import default_config, init_config, merge_deep
from vlnorm.core.errors import VlnormError
from vlnorm.core.models import Diagnostic, NormalizeResult, StackProperties
from vlnorm.infra.settings import NormalizerSettings
from vlnorm.normalize.normalizer import Normalizer, normalize
from vlnorm.normalize.spec import field_defs

__version__ = "0.1.0"

__all__ = [
    "CompositeMarkRegistry",
    "Diagnostic",
    "NormalizeResult",
    "Normalizer",
    "NormalizerSettings",
    "StackProperties",
    "VlnormError",
    "__version__",
    "assemble_stack_transforms",
    "compute_stack_properties",
    "default_config",
    "default_registry",
    "field_defs",
    "init_config",
    "merge_deep",
    "normalize",
    "stack_transform",
]
