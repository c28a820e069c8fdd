"""
Command Line Interface Package

Command Structure:
- receipt-reconciler: Main entry point with utility commands (version, config)
- receipt-reconciler reconcile run: Review a parsed receipt and export the purchase
- receipt-reconciler reconcile score: Preview how a barcode scores against open lines
"""
