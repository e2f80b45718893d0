"""Source analysis collaborators."""

from .locator import PythonSourceAnalyzer, SourceAnalyzer, module_name_for_path

__all__ = ["PythonSourceAnalyzer", "SourceAnalyzer", "module_name_for_path"]
