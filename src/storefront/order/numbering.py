"""Sequential order numbers backed by a single counter record per entity type."""

from protean.exceptions import ObjectNotFoundError
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront

ORDER_COUNTER = "order"
ORDER_NUMBER_PREFIX = "ORD-"


@storefront.aggregate
class Counter:
    name = String(identifier=True, max_length=50)
    value = Integer(default=0, min_value=0)

    def increment(self) -> int:
        self.value += 1
        return self.value


def next_value(name: str) -> int:
    """Increment and return the counter called ``name``, creating it at zero."""
    repo = current_domain.repository_for(Counter)
    try:
        counter = repo.get(name)
    except ObjectNotFoundError:
        counter = Counter(name=name, value=0)

    value = counter.increment()
    repo.add(counter)
    return value


def format_order_number(value: int) -> str:
    return f"{ORDER_NUMBER_PREFIX}{value:08d}"


def next_order_number() -> str:
    return format_order_number(next_value(ORDER_COUNTER))
