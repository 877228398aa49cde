from .formatter import build_java_tool_options, calculated_options, format_memory, render_report

__all__ = ["build_java_tool_options", "calculated_options", "format_memory", "render_report"]
