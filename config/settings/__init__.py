"""Settings package for the ClassBook project.

`base.py` contains configuration shared by every environment; `dev.py`,
`prod.py` and `test.py` extend it with environment specific overrides.
"""
