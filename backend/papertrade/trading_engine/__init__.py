"""
Trading Engine Components

Fill execution building blocks used by TradingService and the
pending-order sweep:
- BuyExecutor: funds check, cash debit, position upsert
- SellExecutor: shares check, cash credit, position reduction/closure
- PositionManager: position lookup, weighted-average cost, closure
- OrderLogger: append-only fill history
"""
