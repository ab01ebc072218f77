"""Incremental barrel (index) file maintenance."""

from barrelwatch.barrel.analyzer import Dialect, ExportAnalyzer, dialect_for_path
from barrelwatch.barrel.cache import ExportCache
from barrelwatch.barrel.generator import IndexGenerator, render
from barrelwatch.barrel.models import ExportShape, FileAction, FileRecord
from barrelwatch.barrel.reconciler import EventReconciler
from barrelwatch.barrel.scanner import DirectoryScanner
from barrelwatch.barrel.scheduler import DebounceScheduler
from barrelwatch.barrel.session import LifecycleHooks, WatchSession

__all__ = [
    "DebounceScheduler",
    "Dialect",
    "DirectoryScanner",
    "EventReconciler",
    "ExportAnalyzer",
    "ExportCache",
    "ExportShape",
    "FileAction",
    "FileRecord",
    "IndexGenerator",
    "LifecycleHooks",
    "WatchSession",
    "dialect_for_path",
    "render",
]
