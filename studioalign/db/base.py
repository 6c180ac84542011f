# /studioalign/db/base.py

# Central registry for all SQLAlchemy models. Importing them here makes sure
# `Base.metadata` knows every table when Alembic or `create_all` runs.

from .base_class import Base

from .models.user_models import User, Owner, Teacher, Parent
from .models.studio_models import Studio, Location, Student
from .models.class_models import Class, ClassInstance, ClassStudent, InstanceEnrollment, AttendanceRecord
from .models.messaging_models import Conversation, ConversationParticipant, Message
from .models.channel_models import ClassChannel, ChannelPost
from .models.invoice_models import PricingPlan, PlanEnrollment, Invoice, InvoiceItem
