"""
Test Suite for Receipt Reconciler

Test Structure:
- fixtures/: Synthetic catalog, price history and receipt data
- unit/: Unit tests mirroring src/ package structure
- integration/: CLI workflow tests

Test Categories:
- Core utilities (amounts, models, config)
- Catalog lookup and loading
- Matching (normalization, scoring, session, confirmation)

Test Data:
All products, barcodes and prices are synthetic.
"""
