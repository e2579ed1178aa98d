"""Domain layer — pure logic with no infrastructure dependencies.

Categories, mode lifecycle, registry resolution, migration plans, labels,
and the error taxonomy. Must never import from infrastructure, services,
commands, or output.
"""
