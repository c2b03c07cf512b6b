"""
Components layer.

Pure, storage-free building blocks used by the contact handlers:
- `contact_validator` checks a candidate contact payload against the contact schema
- `contact_query` turns list-request parameters into a filter/offset/limit triple

Both expose their inputs and outputs through the models in `contracts.py`.
"""
