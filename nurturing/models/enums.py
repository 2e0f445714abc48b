"""String constants stored in the nurturing tables."""


class NurturingChannel:
    SMS = 'SMS'
    WHATSAPP = 'WHATSAPP'
    EMAIL = 'EMAIL'

    ALL = (SMS, WHATSAPP, EMAIL)


class NurturingType:
    # Mirrors the channel for now
    SMS = 'SMS'
    WHATSAPP = 'WHATSAPP'
    EMAIL = 'EMAIL'

    ALL = (SMS, WHATSAPP, EMAIL)


class EnrollmentStatus:
    ACTIVE = 'ACTIVE'
    COMPLETED = 'COMPLETED'
    CANCELLED = 'CANCELLED'


class TaskStatus:
    PENDING = 'PENDING'
    EXECUTING = 'EXECUTING'  # claimed by a processing pass
    EXECUTED = 'EXECUTED'
    FAILED = 'FAILED'
    CANCELLED = 'CANCELLED'

    OPEN = (PENDING, EXECUTING)
    TERMINAL = (EXECUTED, FAILED, CANCELLED)


class WhatsAppProvider:
    TWILIO = 'twilio'
    META = 'meta'
