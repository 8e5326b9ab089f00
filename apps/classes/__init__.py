"""Classes app package.

Holds the recurring weekly class templates, the dated sessions generated
from them and the capacity ledger that owns each session's seat counter.
Sessions are materialized over a rolling two week horizon; the ledger's
reserve/release operations are single conditional UPDATE statements so two
requests racing for the last seat cannot both succeed.
"""
