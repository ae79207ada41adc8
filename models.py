import uuid
from datetime import datetime

from flask_login import UserMixin

from extensions import db

ADMIN_ROLE = 'admin'
STAFF_ROLE = 'staff'
ROLES = (ADMIN_ROLE, STAFF_ROLE)

TICKET_STATUSES = ('submitted', 'in_progress', 'resolved', 'closed')
OPEN_STATUSES = ('submitted', 'in_progress')
URGENCY_LEVELS = ('low', 'medium', 'high', 'critical')

DETENTION_STATUSES = ('pending', 'confirmed', 'attended', 'missed')


def _new_id():
    return str(uuid.uuid4())


class User(db.Model, UserMixin):
    """
    Staff account. Staff sign in with their P number; admins are staff
    accounts with the 'admin' role.
    """
    __tablename__ = 'users'

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    p_number = db.Column(db.String(50), unique=True, nullable=False)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    role = db.Column(db.String(50), nullable=False, default=STAFF_ROLE)  # 'staff', 'admin'
    password_hash = db.Column(db.String(256), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"User('{self.p_number}', '{self.role}')"


class Ticket(db.Model):
    """
    IT help ticket. p_number is the owner key used to scope what non-admin
    staff can see.
    """
    __tablename__ = 'tickets'
    __table_args__ = (
        db.CheckConstraint(
            "status IN ('submitted', 'in_progress', 'resolved', 'closed')",
            name='ck_tickets_status',
        ),
    )

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    ticket_id = db.Column(db.String(50), unique=True, nullable=False)  # TICKET-2025-XXXXX
    requester_name = db.Column(db.String(255), nullable=True)
    requester_email = db.Column(db.String(255), nullable=True)
    p_number = db.Column(db.String(50), nullable=True, index=True)
    room_number = db.Column(db.String(50), nullable=True)
    category = db.Column(db.String(100), nullable=True)
    subject = db.Column(db.String(255), nullable=True)
    description = db.Column(db.Text, nullable=False)
    urgency = db.Column(db.String(20), nullable=False, default='medium')
    status = db.Column(db.String(50), nullable=False, default='submitted')
    assigned_to = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    assigned_user = db.relationship('User', foreign_keys=[assigned_to], backref='assigned_tickets')
    updates = db.relationship(
        'TicketUpdate',
        backref='ticket',
        lazy='dynamic',
        cascade='all, delete-orphan',
    )

    def to_dict(self):
        return {
            'id': self.id,
            'ticketId': self.ticket_id,
            'requesterName': self.requester_name,
            'requesterEmail': self.requester_email,
            'pNumber': self.p_number,
            'roomNumber': self.room_number,
            'category': self.category,
            'subject': self.subject,
            'description': self.description,
            'urgency': self.urgency,
            'status': self.status,
            'assignedTo': self.assigned_to,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"Ticket('{self.ticket_id}', Status: '{self.status}', Owner: {self.p_number})"


class TicketUpdate(db.Model):
    """Note left on a ticket, optionally recording a status change."""
    __tablename__ = 'ticket_updates'

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    ticket_id = db.Column(db.String(36), db.ForeignKey('tickets.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    note = db.Column(db.Text, nullable=False)
    status_change = db.Column(db.String(50), nullable=True)
    is_internal = db.Column(db.Boolean, default=False, nullable=False)  # Staff-only notes
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user = db.relationship('User', backref='ticket_updates')

    def to_dict(self):
        return {
            'id': self.id,
            'note': self.note,
            'statusChange': self.status_change,
            'isInternal': self.is_internal,
            'userName': self.user.name if self.user else None,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"TicketUpdate(Ticket: {self.ticket_id}, Status change: {self.status_change})"


class Detention(db.Model):
    """Detention reported by a staff member for a student."""
    __tablename__ = 'detentions'
    __table_args__ = (
        db.CheckConstraint(
            "status IN ('pending', 'confirmed', 'attended', 'missed')",
            name='ck_detentions_status',
        ),
    )

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    detention_id = db.Column(db.String(50), unique=True, nullable=False)  # DET-2025-XXXXX
    student_name = db.Column(db.String(255), nullable=False)
    student_id = db.Column(db.String(50), nullable=False)
    reason = db.Column(db.Text, nullable=False)
    detention_date = db.Column(db.DateTime, nullable=False)
    detention_time = db.Column(db.String(10), nullable=False)  # e.g. "15:30"
    reporting_staff = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(50), nullable=False, default='pending')
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    updates = db.relationship(
        'DetentionUpdate',
        backref='detention',
        lazy='dynamic',
        cascade='all, delete-orphan',
    )

    def to_dict(self):
        return {
            'id': self.id,
            'detentionId': self.detention_id,
            'studentName': self.student_name,
            'studentId': self.student_id,
            'reason': self.reason,
            'detentionDate': self.detention_date.isoformat() if self.detention_date else None,
            'detentionTime': self.detention_time,
            'reportingStaff': self.reporting_staff,
            'status': self.status,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"Detention('{self.detention_id}', Status: '{self.status}', Student: {self.student_id})"


class DetentionUpdate(db.Model):
    __tablename__ = 'detention_updates'

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    detention_id = db.Column(db.String(36), db.ForeignKey('detentions.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    note = db.Column(db.Text, nullable=False)
    status_change = db.Column(db.String(50), nullable=True)
    is_internal = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user = db.relationship('User', backref='detention_updates')

    def to_dict(self):
        return {
            'id': self.id,
            'note': self.note,
            'statusChange': self.status_change,
            'isInternal': self.is_internal,
            'userName': self.user.name if self.user else None,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"DetentionUpdate(Detention: {self.detention_id}, Status change: {self.status_change})"


class ActivityLog(db.Model):
    """
    Model for tracking user activities for auditing and security purposes.
    """
    __tablename__ = 'activity_log'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    action = db.Column(db.String(100), nullable=False)
    details = db.Column(db.Text, nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.Text, nullable=True)
    success = db.Column(db.Boolean, default=True)
    error_message = db.Column(db.Text, nullable=True)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship('User', backref='activity_logs', lazy=True)

    def __repr__(self):
        return f"ActivityLog(User: {self.user_id}, Action: {self.action}, Success: {self.success})"
