"""
Services for muxops task execution.

This package contains the components that do the actual work behind the
task catalog: running commands, generating bindings, managing the
container stack and collecting reports.
"""
