"""Role composition and playbook assembly.

Provides:
- RoleCatalog: Ordered strategy registry resolving role ids to RoleArtifacts
- route_for: Host-group routing for role phases
- build_inventory: Per-environment inventory generation
- PlaybookAssembler: Three-phase site.yml assembly
- CompositionEngine: Selection + environment -> ProjectArtifact
- ProjectBuilder: Packaging entry point over the engine
- TextValidator: Well-formedness checks for generated text
- GenerationService: Quota and history collaborators around the builder
- BatchRunner: Bounded-parallel batch composition
"""

from .assembler import PlaybookAssembler
from .batch import BatchJob, BatchReport, BatchRunner
from .builder import ProjectBuilder, build
from .catalog import RoleCatalog, build_catalog, default_catalog
from .engine import CompositionEngine, normalize_selection
from .export import to_zip_bytes, write_project
from .inventory import build_inventory
from .router import route_for
from .service import GenerationService
from .validation import TextValidator

__all__ = [
    "PlaybookAssembler",
    "BatchJob",
    "BatchReport",
    "BatchRunner",
    "ProjectBuilder",
    "build",
    "RoleCatalog",
    "build_catalog",
    "default_catalog",
    "CompositionEngine",
    "normalize_selection",
    "to_zip_bytes",
    "write_project",
    "build_inventory",
    "route_for",
    "GenerationService",
    "TextValidator",
]
