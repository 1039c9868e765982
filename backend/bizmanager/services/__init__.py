"""Pure helpers shared by the store, the serializers and the views.

Import the submodules directly (``from .services import ledger``); the
package itself re-exports nothing so that :mod:`bizmanager.entities` can use
the money and totals helpers without pulling in the ledger engine.
"""
