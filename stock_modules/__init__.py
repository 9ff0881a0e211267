"""
Stock Modules.

Thin orchestration layers over the Stock Kernel and Engines.

Modules:
- Inventory: source items, item persistence, SKU suggestion
- Breakdown: derived records, breakdown session state machine, commit
- Purchasing: purchase lines, purchase document editor, save gate,
  persistence, reporting

Arithmetic lives in ``stock_engines``; modules hold state and talk to
repositories.
"""
