"""Research workflows.

- ``report``: outline -> chapters -> content -> final report, each phase
  driven by the generate/critique/judge loop
- ``task_plan``: task plan -> search list -> page summaries -> final output
"""
