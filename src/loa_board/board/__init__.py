"""
Managed board display engine.

Modules
=======

``models``
    Value types: characters, targets, links and rendered rows.
``marker``
    Pure predicates recognizing bot-owned board messages by footer tag.
``ranking``
    Item level parsing and ordering.
``render``
    Embed builders for the shared board and personal views.
``discovery``
    Registry recovery by scanning recent channel history.
``ensure``
    Idempotent find-or-post of a channel's board message.
``refresh``
    The sequential, failure-isolated work of one refresh tick.
``scheduler``
    Periodic ticker helpers.
``engine``
    :class:`~loa_board.board.engine.BoardEngine`, the state holder tying the
    above together behind the operations used by slash commands.
"""
