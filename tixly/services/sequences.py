from sqlalchemy.orm import Session

from tixly.models.sequence import Sequence

EVENT_SEQUENCE = "event"
CERTIFICATE_SEQUENCE = "certificate"

# Event ids start at 0, certificate ids at 1
INITIAL_VALUES = {
    EVENT_SEQUENCE: 0,
    CERTIFICATE_SEQUENCE: 1,
}


def next_id(db: Session, name: str) -> int:
    """
    Take the next value of a named sequence.

    The increment belongs to the caller's transaction: a rolled back
    operation gives its id back, a committed one never sees it again.
    """
    sequence = db.get(Sequence, name)
    if sequence is None:
        sequence = Sequence(name=name, next_value=INITIAL_VALUES[name])
        db.add(sequence)
    value = sequence.next_value
    sequence.next_value = value + 1
    return value
