"""Fix descriptions emitted by module probes.

The remediation registry keys its actions on these exact strings, so probes
and the executor share one vocabulary. Anything not listed here is still a
valid fix description; it just maps to the generic no-op action.
"""

# Identity & session
FORCE_REMOUNT = "Verify presentation component mounting and routing"
CHECK_FORM_COMPONENTS = "Check form component implementation"
VERIFY_OAUTH = "Verify OAuth component integration"
VERIFY_API_ROUTING = "Verify API routing configuration"
RESTART_AUTH_SERVICE = "Restart authentication service"
CLEAR_CORRUPTED_SESSION = "Clear corrupted session data and force re-authentication"
CLEAR_AUTH_CACHE = "Clear authentication cache and restart auth service"

# Guided setup
RESET_SETUP_STATE = "Reset guided setup wizard state"
CLEAR_SETUP_DATA = "Clear corrupted guided setup data"
VERIFY_SETUP_ROUTING = "Verify guided setup API routing"
RESTART_SETUP_SERVICE = "Restart guided setup service"
ADD_FORM_VALIDATION = "Add form validation to guided setup steps"

# Billing
VERIFY_PAYMENT_FORM = "Verify payment form integration"
INIT_SUBSCRIPTION = "Initialize subscription service"
CONFIGURE_PAYMENT_WEBHOOK = "Configure payment webhook endpoints"
RESTART_PAYMENT_SERVICE = "Restart payment processing service"

# Strategy engine
VERIFY_BEHAVIOR_COMPONENTS = "Verify behavior logging components"
VERIFY_STRATEGY_ROUTING = "Verify strategy service routing and deployment"
CHECK_STRATEGY_LOGS = "Check strategy service logs and restart if needed"
RESTART_STRATEGY_SERVICE = "Emergency restart of strategy generation service"
INIT_BEHAVIOR_LOGS = "Initialize behavior log store"

# Content library
VERIFY_LIBRARY_LOADING = "Verify resource library data loading"
RESTORE_FILTERING = "Restore content filtering functionality"
RESTORE_DOWNLOADS = "Restore resource download system"

# Reporting
VERIFY_ANALYTICS_PIPELINE = "Verify analytics data pipeline"
DEPLOY_ANALYTICS_ENDPOINTS = "Deploy analytics service endpoints"
RESTART_ANALYTICS_SERVICE = "Restart analytics processing service"
RESTORE_CHARTS = "Restore chart and visualization components"

# Fallback used by the planner when a module recorded no fixes
GENERIC_RESTART = "Restart service"
