from .base import Base
from .users import User
from .category import Category
from .course import Course
from .payment import Payment
from .course_enrollment import CourseEnrollment
from .cart import Cart
from .enrollment_notification_request import EnrollmentNotificationRequest
