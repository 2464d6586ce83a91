"""Server-side validation for the web client's forms.

Each validator takes the submitted form mapping and returns a ``FormResult``
holding the cleaned values and a field -> message dict of errors.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Mapping

from mantrasetu.app.services.catalog import AVAILABILITY_MODES, GENDERS, SERVICE_CATEGORIES

EMAIL_PATTERN = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)
PHONE_PATTERN = re.compile(r"^[\+]?[1-9][\d]{0,15}$")
TEN_DIGIT_PHONE = re.compile(r"^[0-9]{10}$")
STRONG_PASSWORD = re.compile(r"(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")

STRENGTH_LABELS = ["Very Weak", "Weak", "Fair", "Good", "Strong"]


@dataclass(slots=True)
class FormResult:
    data: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def first_error(self) -> str | None:
        return next(iter(self.errors.values()), None)


def _text(form: Mapping[str, Any], key: str) -> str:
    value = form.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _getlist(form: Mapping[str, Any], key: str) -> list[str]:
    if hasattr(form, "getlist"):
        values = form.getlist(key)
    else:
        raw = form.get(key)
        values = raw if isinstance(raw, (list, tuple)) else ([raw] if raw else [])
    return [str(value).strip() for value in values if value is not None and str(value).strip()]


def _checked(form: Mapping[str, Any], key: str) -> bool:
    return _text(form, key).lower() in {"on", "true", "1", "yes"}


def _check_email(result: FormResult, email: str) -> None:
    if not email:
        result.errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.match(email):
        result.errors["email"] = "Invalid email address"


def _check_name(result: FormResult, key: str, value: str, label: str) -> None:
    if not value:
        result.errors[key] = f"{label} is required"
    elif len(value) < 2:
        result.errors[key] = f"{label} must be at least 2 characters"


def password_strength(password: str) -> tuple[int, str]:
    """Score a password from 0 to 5 and label it."""

    score = 0
    if len(password) >= 8:
        score += 1
    if re.search(r"[a-z]", password):
        score += 1
    if re.search(r"[A-Z]", password):
        score += 1
    if re.search(r"\d", password):
        score += 1
    if re.search(r"[^a-zA-Z\d]", password):
        score += 1
    return score, STRENGTH_LABELS[min(score, len(STRENGTH_LABELS) - 1)]


def validate_login(form: Mapping[str, Any]) -> FormResult:
    result = FormResult()
    email = _text(form, "email")
    password = form.get("password") or ""

    _check_email(result, email)
    if not password:
        result.errors["password"] = "Password is required"
    elif len(password) < 6:
        result.errors["password"] = "Password must be at least 6 characters"

    result.data = {"email": email, "password": password}
    return result


def validate_registration(form: Mapping[str, Any]) -> FormResult:
    result = FormResult()
    first_name = _text(form, "firstName")
    last_name = _text(form, "lastName")
    email = _text(form, "email")
    phone = _text(form, "phone")
    password = form.get("password") or ""
    confirm = form.get("confirmPassword") or ""

    _check_name(result, "firstName", first_name, "First name")
    _check_name(result, "lastName", last_name, "Last name")
    _check_email(result, email)

    if not phone:
        result.errors["phone"] = "Phone number is required"
    elif not PHONE_PATTERN.match(phone):
        result.errors["phone"] = "Please enter a valid phone number"
    elif len(phone) < 10:
        result.errors["phone"] = "Phone number must be at least 10 digits"

    if not password:
        result.errors["password"] = "Password is required"
    elif len(password) < 8:
        result.errors["password"] = "Password must be at least 8 characters"
    elif not STRONG_PASSWORD.search(password):
        result.errors["password"] = (
            "Password must contain at least one uppercase letter, one lowercase letter, and one number"
        )

    if not confirm:
        result.errors["confirmPassword"] = "Please confirm your password"
    elif confirm != password:
        result.errors["confirmPassword"] = "Passwords do not match"

    if not _checked(form, "acceptTerms"):
        result.errors["acceptTerms"] = "You must accept the terms and conditions"

    result.data = {
        "firstName": first_name,
        "lastName": last_name,
        "email": email,
        "phone": phone,
        "password": password,
    }
    return result


def validate_pandit_onboarding(form: Mapping[str, Any]) -> FormResult:
    """Validate the pandit onboarding form and build its multipart fields."""

    result = FormResult()
    first_name = _text(form, "firstName")
    last_name = _text(form, "lastName")
    email = _text(form, "email")
    phone = _text(form, "phone")
    password = form.get("password") or ""
    confirm = form.get("confirmPassword") or ""
    gender = _text(form, "gender")
    availability = _text(form, "availability")
    education = _text(form, "education")
    bio = _text(form, "bio")
    languages = _getlist(form, "languagesSpoken")
    specializations = _getlist(form, "specialization")
    service_areas = _getlist(form, "serviceAreas")
    achievements = _getlist(form, "achievements")

    _check_name(result, "firstName", first_name, "First name")
    _check_name(result, "lastName", last_name, "Last name")
    _check_email(result, email)

    if not phone:
        result.errors["phone"] = "Phone number is required"
    elif not TEN_DIGIT_PHONE.match(phone):
        result.errors["phone"] = "Please enter a valid 10-digit phone number"

    if not password:
        result.errors["password"] = "Password is required"
    elif len(password) < 6:
        result.errors["password"] = "Password must be at least 6 characters"
    if not confirm:
        result.errors["confirmPassword"] = "Please confirm your password"
    elif confirm != password:
        result.errors["confirmPassword"] = "Passwords do not match"

    if not _checked(form, "acceptTerms"):
        result.errors["acceptTerms"] = "You must accept the terms and conditions"
    if gender not in GENDERS:
        result.errors["gender"] = "Please select gender"
    if availability not in AVAILABILITY_MODES:
        result.errors["availability"] = "Please select availability (Offline/Online/Both)"

    experience_raw = _text(form, "experienceYears")
    experience = 0
    if not experience_raw:
        result.errors["experienceYears"] = "Experience is required"
    else:
        try:
            experience = int(experience_raw)
        except ValueError:
            result.errors["experienceYears"] = "Experience must be a whole number of years"
        else:
            if experience < 0:
                result.errors["experienceYears"] = "Experience cannot be negative"
            elif experience > 50:
                result.errors["experienceYears"] = "Maximum experience is 50 years"

    if not education:
        result.errors["education"] = "Education is required"
    elif len(education) < 5:
        result.errors["education"] = "Please provide more details about your education"

    if not bio:
        result.errors["bio"] = "Bio is required"
    elif len(bio) < 50:
        result.errors["bio"] = "Bio must be at least 50 characters"
    elif len(bio) > 1000:
        result.errors["bio"] = "Bio must be less than 1000 characters"

    if not languages:
        result.errors["languagesSpoken"] = "Please select at least one language"
    if not specializations:
        result.errors["specialization"] = "Please select at least one specialization"
    if not service_areas:
        result.errors["serviceAreas"] = "Please select at least one service area"

    result.data = {
        "firstName": first_name,
        "lastName": last_name,
        "email": email,
        "phone": phone,
        "password": password,
        "role": "PANDIT",
        "gender": gender,
        "experienceYears": str(experience),
        "specialization": json.dumps(specializations, ensure_ascii=False),
        "languagesSpoken": json.dumps(languages),
        "serviceAreas": json.dumps(service_areas),
        "availability": availability,
        "bio": bio,
        "education": education,
        "achievements": json.dumps(achievements),
    }
    return result


def validate_contact(form: Mapping[str, Any]) -> FormResult:
    result = FormResult()
    name = _text(form, "name")
    email = _text(form, "email")
    phone = _text(form, "phone")
    subject = _text(form, "subject")
    message = _text(form, "message")

    if not name:
        result.errors["name"] = "Name is required"
    _check_email(result, email)
    if not subject:
        result.errors["subject"] = "Subject is required"
    if not message:
        result.errors["message"] = "Message is required"

    result.data = {
        "name": name,
        "email": email,
        "phone": phone or None,
        "subject": subject,
        "message": message,
        "type": "GENERAL",
    }
    return result


def validate_service(form: Mapping[str, Any]) -> FormResult:
    """Validate the admin service editor."""

    result = FormResult()
    name = _text(form, "name")
    category = _text(form, "category") or "POOJA"

    if not name:
        result.errors["name"] = "Service name is required"
    if category not in SERVICE_CATEGORIES:
        result.errors["category"] = "Please choose a valid category"

    duration = 60
    duration_raw = _text(form, "durationMinutes")
    if duration_raw:
        try:
            duration = int(duration_raw)
        except ValueError:
            result.errors["durationMinutes"] = "Duration must be a whole number of minutes"
        else:
            if duration < 1:
                result.errors["durationMinutes"] = "Duration must be at least 1 minute"

    base_price = 0.0
    price_raw = _text(form, "basePrice")
    if not price_raw:
        result.errors["basePrice"] = "Base price is required"
    else:
        try:
            base_price = float(price_raw)
        except ValueError:
            result.errors["basePrice"] = "Base price must be a number"
        else:
            if base_price < 0:
                result.errors["basePrice"] = "Base price cannot be negative"

    tags: list[str] = []
    for tag in _text(form, "tags").split(","):
        cleaned = tag.strip()
        if cleaned and cleaned not in tags:
            tags.append(cleaned)

    result.data = {
        "name": name,
        "description": _text(form, "description"),
        "category": category,
        "subcategory": _text(form, "subcategory") or None,
        "durationMinutes": duration,
        "basePrice": base_price,
        "isVirtual": _checked(form, "isVirtual"),
        "requiresSamagri": _checked(form, "requiresSamagri"),
        "instructions": _text(form, "instructions") or None,
        "isActive": _checked(form, "isActive"),
        "imageUrl": _text(form, "imageUrl") or None,
        "tags": tags,
    }
    return result


def validate_review(form: Mapping[str, Any]) -> FormResult:
    result = FormResult()
    comment = _text(form, "comment")
    rating = 0
    try:
        rating = int(_text(form, "rating"))
    except ValueError:
        result.errors["rating"] = "Please select a rating"
    else:
        if not 1 <= rating <= 5:
            result.errors["rating"] = "Rating must be between 1 and 5"
    if not comment:
        result.errors["comment"] = "Please write a short review"
    result.data = {"rating": rating, "comment": comment}
    return result


def validate_profile(form: Mapping[str, Any]) -> FormResult:
    result = FormResult()
    first_name = _text(form, "firstName")
    last_name = _text(form, "lastName")
    phone = _text(form, "phone")
    gender = _text(form, "gender").lower()

    _check_name(result, "firstName", first_name, "First name")
    _check_name(result, "lastName", last_name, "Last name")
    if phone and not PHONE_PATTERN.match(phone):
        result.errors["phone"] = "Please enter a valid phone number"
    if gender and gender not in {"male", "female", "other"}:
        result.errors["gender"] = "Please select a valid gender"

    result.data = {
        "firstName": first_name,
        "lastName": last_name,
        "phone": phone,
        "preferredLanguage": _text(form, "preferredLanguage") or "en",
        "gender": gender or None,
    }
    return result


def validate_password_change(form: Mapping[str, Any]) -> FormResult:
    result = FormResult()
    current = form.get("currentPassword") or ""
    new = form.get("newPassword") or ""
    confirm = form.get("confirmPassword") or ""

    if not current:
        result.errors["currentPassword"] = "Current password is required"
    if not new:
        result.errors["newPassword"] = "New password is required"
    elif len(new) < 8:
        result.errors["newPassword"] = "Password must be at least 8 characters"
    if confirm != new:
        result.errors["confirmPassword"] = "Passwords do not match"

    result.data = {"currentPassword": current, "newPassword": new}
    return result


def validate_cancellation(form: Mapping[str, Any]) -> FormResult:
    result = FormResult()
    reason = _text(form, "reason")
    if not reason:
        result.errors["reason"] = "Please tell us why you are cancelling"
    result.data = {"reason": reason}
    return result


def validate_reschedule(form: Mapping[str, Any]) -> FormResult:
    result = FormResult()
    booking_date = _text(form, "bookingDate")
    booking_time = _text(form, "bookingTime")
    if not booking_date:
        result.errors["bookingDate"] = "Please choose a new date"
    if not booking_time:
        result.errors["bookingTime"] = "Please choose a new time"
    result.data = {"newDateTime": f"{booking_date}T{booking_time}" if booking_date and booking_time else ""}
    return result
