"""Wiring of the order services around one request-scoped session."""

from sqlalchemy.orm import Session

from marketplace.db.transaction import TransactionScope
from marketplace.repositories.catalog import SqlAddressBook, SqlCatalogReader
from marketplace.repositories.deliverers import SqlDelivererRepository
from marketplace.repositories.events import SqlOrderEventLog
from marketplace.repositories.orders import SqlOrderRepository
from marketplace.services.access import OrderAccessGate
from marketplace.services.assignment import AssignmentCoordinator
from marketplace.services.checkout import CheckoutService
from marketplace.services.state_machine import OrderStateMachine


class OrderServices:
    """Checkout, state machine, assignment and access gate sharing one transaction scope."""

    def __init__(self, db: Session) -> None:
        transaction = TransactionScope(db)
        orders = SqlOrderRepository(db)
        events = SqlOrderEventLog(db)
        deliverers = SqlDelivererRepository(db)

        self.checkout: CheckoutService = CheckoutService(
            catalog=SqlCatalogReader(db),
            addresses=SqlAddressBook(db),
            orders=orders,
            events=events,
            transaction=transaction,
        )
        self.assignments: AssignmentCoordinator = AssignmentCoordinator(
            orders=orders,
            deliverers=deliverers,
            events=events,
            transaction=transaction,
        )
        self.state_machine: OrderStateMachine = OrderStateMachine(
            orders=orders,
            events=events,
            assignments=self.assignments,
            transaction=transaction,
        )
        self.access: OrderAccessGate = OrderAccessGate(orders=orders, events=events)
