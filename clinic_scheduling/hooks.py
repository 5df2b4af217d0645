app_name = "clinic_scheduling"
app_title = "Clinic Scheduling"
app_publisher = "Sebastian Ortiz Valencia"
app_description = "Agenda de citas con disponibilidad por horario de atención y control de solapamientos"
app_email = "sebastianortiz989@gmail.com"
app_license = "mit"

# Apps
# ------------------

# required_apps = []

# Installation
# ------------

# before_install = "clinic_scheduling.install.before_install"
# after_install = "clinic_scheduling.install.after_install"

# Migration
# ---------

# Valida scheduling_* en site_config.json después de cada migración
after_migrate = [
	"clinic_scheduling.clinic_scheduling.scheduling.frappe_store.validate_grid_config"
]

# Document Events
# ---------------
# Hook on document methods and events

# doc_events = {
# 	"*": {
# 		"on_update": "method",
# 		"on_cancel": "method",
# 		"on_trash": "method"
# 	}
# }

# Testing
# -------

# before_tests = "clinic_scheduling.install.before_tests"

# Request Events
# ----------------
# before_request = ["clinic_scheduling.utils.before_request"]
# after_request = ["clinic_scheduling.utils.after_request"]

# Automatically update python controller files with type annotations for this app.
# export_python_type_annotations = True
