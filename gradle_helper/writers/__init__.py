"""
Writer modules for configuration records and validation reports.
"""

from .base import ConfigurationWriter
from .script_writer import GroovyScriptWriter, KotlinScriptWriter, ScriptWriter
from .json_writer import JsonReportWriter, JsonWriter
from .report_writer import ConsoleReportFormatter
from .factory import WriterFactory

__all__ = [
    'ConfigurationWriter',
    'ScriptWriter',
    'KotlinScriptWriter',
    'GroovyScriptWriter',
    'JsonWriter',
    'JsonReportWriter',
    'ConsoleReportFormatter',
    'WriterFactory',
]
