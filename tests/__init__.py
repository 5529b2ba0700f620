# =============================================================================
# tests/ - Test Suite
# =============================================================================
# Tests for the ICF Log API:
# - test_number_utils.py: locale-aware number parsing and formatting
# - test_email_content.py: admin email content conversion and placeholders
# - test_export_utils.py: CSV/Excel exports and the ICF coaching log workbook
# - test_webhook_security.py: Stripe and Calendly signature checks
# - test_clients.py, test_sessions.py, test_cpd.py, test_mentoring.py: logbook API
# - test_billing.py, test_plan_limits.py: plans, usage, checkout and the Stripe webhook
# - test_admin.py, test_admin_email.py: admin dashboard and email campaigns
# - test_reminders.py, test_push.py: automated reminders and web push
# - test_calendly.py: Calendly OAuth, events and booking webhook
# - test_users.py: profile, last entry date and notification preferences
# - test_uploads.py: supporting documents in R2
#
# Run tests with: pytest
# =============================================================================
