"""
Role-based navigation manifests.

Each role maps to the dashboard shell the client renders: title, sidebar
entries, landing route and header badge. FRONT_DESK and SUPER_ADMIN use their
own dedicated screens and therefore carry no sidebar entries.
"""

from .models import Role


def _nav(name, href, module):
    return {'name': name, 'href': href, 'module': module}


DASHBOARD_CONFIG = {
    Role.OWNER: {
        'display_name': 'Hotel Owner',
        'subtitle': 'Hotel Owner Dashboard',
        'navigation': [
            _nav('Dashboard', '/owner-dashboard/dashboard', 'dashboard'),
            _nav('Hotel Configuration', '/owner-dashboard/configuration', 'configuration'),
            _nav('Reservations', '/owner-dashboard/reservations', 'reservations'),
            _nav('Rooms & Rates', '/owner-dashboard/rooms', 'rooms'),
            _nav('Guests', '/owner-dashboard/guests', 'guests'),
            _nav('Housekeeping', '/owner-dashboard/housekeeping', 'housekeeping'),
            _nav('Billing & Payments', '/owner-dashboard/billing', 'billing'),
            _nav('QR Manager', '/owner-dashboard/qr-manager', 'qr-manager'),
            _nav('QR Analytics', '/owner-dashboard/qr-analytics', 'qr-analytics'),
            _nav('Reports', '/owner-dashboard/reports', 'reports'),
            _nav('Staff & Roles', '/owner-dashboard/staff', 'staff'),
            _nav('Financials', '/owner-dashboard/financials', 'financials'),
            _nav('Profile Settings', '/owner-dashboard/profile', 'profile'),
        ],
        'default_route': '/owner-dashboard/dashboard',
        'header_badge': 'Owner',
        'layout': {'show_trial_banner': True, 'back_to_site_url': '/'},
    },
    Role.MANAGER: {
        'display_name': 'Hotel Manager',
        'subtitle': 'Manager Operations Center',
        'navigation': [
            _nav('Overview', '/manager-dashboard/dashboard', 'dashboard'),
            _nav('Operations', '/manager-dashboard/operations', 'operations'),
            _nav('Approvals', '/manager-dashboard/approvals', 'approvals'),
            _nav('Room Status', '/manager-dashboard/rooms', 'rooms'),
            _nav('Service Requests', '/manager-dashboard/requests', 'requests'),
            _nav('Staff Management', '/manager-dashboard/staff', 'staff'),
            _nav('QR Management', '/manager-dashboard/qr-codes', 'qr-codes'),
            _nav('Department Finance', '/manager-dashboard/financials', 'financials'),
            _nav('Receipt Control', '/manager-dashboard/receipts', 'receipts'),
            _nav('Events & Packages', '/manager-dashboard/events', 'events'),
            _nav('Compliance', '/manager-dashboard/compliance', 'compliance'),
        ],
        'default_route': '/manager-dashboard/dashboard',
        'header_badge': 'Manager',
        'layout': {'back_to_site_url': '/'},
    },
    Role.ACCOUNTANT: {
        'display_name': 'Accountant',
        'subtitle': 'Financial Management',
        'navigation': [
            _nav('Dashboard', '/accountant-dashboard/dashboard', 'dashboard'),
            _nav('Payments', '/accountant-dashboard/payments', 'payments'),
            _nav('Financial Reports', '/accountant-dashboard/reports', 'reports'),
            _nav('Payroll', '/accountant-dashboard/payroll', 'payroll'),
        ],
        'default_route': '/accountant-dashboard/dashboard',
        'header_badge': 'Accountant',
        'layout': {'back_to_site_url': '/'},
    },
    Role.HOUSEKEEPING: {
        'display_name': 'Housekeeping Staff',
        'subtitle': 'Housekeeping Operations Center',
        'navigation': [
            _nav('Dashboard', '/housekeeping-dashboard/dashboard', 'dashboard'),
            _nav('Tasks Board', '/housekeeping-dashboard/tasks', 'tasks'),
            _nav('Amenity Requests', '/housekeeping-dashboard/amenities', 'amenities'),
            _nav('Supplies', '/housekeeping-dashboard/supplies', 'supplies'),
            _nav('OOS Rooms', '/housekeeping-dashboard/oos-rooms', 'oos-rooms'),
            _nav('Staff Assignments', '/housekeeping-dashboard/staff', 'staff'),
            _nav('Audit Logs', '/housekeeping-dashboard/audit', 'audit'),
        ],
        'default_route': '/housekeeping-dashboard/dashboard',
        'header_badge': 'Housekeeping',
        'layout': {'back_to_site_url': '/'},
    },
    Role.MAINTENANCE: {
        'display_name': 'Maintenance Staff',
        'subtitle': 'Maintenance Operations Center',
        'navigation': [
            _nav('Dashboard', '/maintenance-dashboard/dashboard', 'dashboard'),
            _nav('Work Orders', '/maintenance-dashboard/work-orders', 'work-orders'),
            _nav('Preventive Schedule', '/maintenance-dashboard/preventive', 'preventive'),
            _nav('Supplies & Parts', '/maintenance-dashboard/supplies', 'supplies'),
            _nav('Audit Logs', '/maintenance-dashboard/audit', 'audit'),
        ],
        'default_route': '/maintenance-dashboard/dashboard',
        'header_badge': 'Maintenance',
        'layout': {'back_to_site_url': '/'},
    },
    Role.POS: {
        'display_name': 'POS Staff',
        'subtitle': 'Restaurant POS System',
        'navigation': [
            _nav('Live Orders', '/pos/dashboard', 'dashboard'),
            _nav('Kitchen Display', '/pos/kds', 'kds'),
            _nav('Menu Management', '/pos/menu', 'menu'),
            _nav('Payment & Billing', '/pos/payment', 'payment'),
            _nav('Approvals', '/pos/approvals', 'approvals'),
            _nav('Reports', '/pos/reports', 'reports'),
            _nav('Settings', '/pos/settings', 'settings'),
        ],
        'default_route': '/pos/dashboard',
        'header_badge': 'POS',
        'layout': {'back_to_site_url': '/'},
    },
    Role.FRONT_DESK: {
        'display_name': 'Front Desk',
        'subtitle': 'Front Desk Operations',
        'navigation': [],
        'default_route': '/front-desk',
        'header_badge': 'Front Desk',
        'layout': {},
    },
    Role.SUPER_ADMIN: {
        'display_name': 'Super Admin',
        'subtitle': 'System Administration',
        'navigation': [],
        'default_route': '/sa',
        'header_badge': 'Admin',
        'layout': {},
    },
}

UNIFIED_DASHBOARD_ROLES = (
    Role.OWNER,
    Role.MANAGER,
    Role.ACCOUNTANT,
    Role.HOUSEKEEPING,
    Role.MAINTENANCE,
    Role.POS,
)


def uses_unified_dashboard(role: str) -> bool:
    return role in UNIFIED_DASHBOARD_ROLES


def get_navigation_manifest(role: str) -> dict:
    """
    Build the navigation manifest for a role.

    Unknown roles get an empty manifest landing on ``/``.
    """
    config = DASHBOARD_CONFIG.get(role)
    if config is None:
        return {
            'role': role,
            'display_name': '',
            'subtitle': '',
            'navigation': [],
            'default_route': '/',
            'header_badge': '',
            'layout': {},
            'uses_unified_dashboard': False,
        }

    return {
        'role': role,
        'display_name': config['display_name'],
        'subtitle': config['subtitle'],
        'navigation': [dict(item) for item in config['navigation']],
        'default_route': config['default_route'],
        'header_badge': config['header_badge'],
        'layout': dict(config['layout']),
        'uses_unified_dashboard': uses_unified_dashboard(role),
    }
