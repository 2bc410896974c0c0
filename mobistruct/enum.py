from enum import Enum, Flag


class Compliant(Flag):
    '''It indicates which degree of compliantness the data must reflect the format'''
    NONE    = 0
    MAGIC   = 1 << 0  # magic/type tags must match
    TILING  = 1 << 1  # text records must be 4096 bytes
    LAYOUT  = 1 << 2  # record table must be ordered and not overflow
    INHERIT = 1 << 3


# used when no chunk in the hierarchy decides
DEFAULT_COMPLIANT = Compliant.MAGIC | Compliant.TILING


class OpenEnum(Enum):
    '''Enum that never refuses an integer: values without a name become
    an UNKNOWN pseudo-member carrying the raw value, so that the format
    can evolve without breaking the unpacking (and the packing gives back
    the same bytes).'''

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, int):
            return None

        pseudo_member = object.__new__(cls)
        pseudo_member._name_ = 'UNKNOWN'
        pseudo_member._value_ = value

        # cache it so that two unknowns with the same value are the same object
        return cls._value2member_map_.setdefault(value, pseudo_member)

    @property
    def is_unknown(self) -> bool:
        return self._name_ == 'UNKNOWN'

