"""
Security Utilities

Rate limiting and organization scoping for the scheduling API.
"""

import frappe
from frappe import _
from frappe.utils import cint


def check_rate_limit(action: str, limit: int = 10, seconds: int = 60) -> None:
	"""
	Check rate limit for an action by IP address.

	Uses Frappe's cache (Redis) to track request counts per IP.

	Args:
		action: Identifier for the action being rate limited
		limit: Maximum number of requests allowed
		seconds: Time window in seconds

	Raises:
		frappe.TooManyRequestsError: If rate limit exceeded
	"""
	ip = get_client_ip()
	cache_key = f"rate_limit:clinic_scheduling:{action}:{ip}"

	current = cint(frappe.cache.get_value(cache_key) or 0)

	if current >= limit:
		frappe.log_error(
			title=_("Rate Limit Exceeded"),
			message=f"IP: {ip}, Action: {action}, Limit: {limit}/{seconds}s"
		)
		frappe.throw(
			_("Too many requests. Please wait a moment and try again."),
			frappe.TooManyRequestsError
		)

	frappe.cache.set_value(cache_key, current + 1, expires_in_sec=seconds)


def get_client_ip() -> str:
	"""
	Get the real client IP address, handling proxies.

	Returns:
		str: Client IP address
	"""
	request = getattr(frappe.local, "request", None)
	if request is None:
		return "unknown"

	# X-Forwarded-For can contain multiple IPs, take the first one
	forwarded_for = request.headers.get("X-Forwarded-For", "")
	if forwarded_for:
		return forwarded_for.split(",")[0].strip()

	real_ip = request.headers.get("X-Real-IP", "")
	if real_ip:
		return real_ip.strip()

	return request.remote_addr or "unknown"


def get_current_organization() -> str:
	"""
	Organization of the session user (user default "organization").

	Raises:
		frappe.PermissionError: If the user has no organization assigned
	"""
	organization = frappe.defaults.get_user_default("organization")
	if not organization:
		frappe.throw(_("Usuario sin organización asignada"), frappe.PermissionError)
	return organization
