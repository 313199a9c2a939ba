# Inbound (client -> server)
CREATE_ROOM = "create-room"
JOIN_ROOM = "join-room"
RECONNECT_ROOM = "reconnect-room"
TABLET_MOVEMENT = "tablet-movement"
TOUCH_MOVEMENT = "touch-movement"
TOGGLE_FLASHLIGHT = "toggle-flashlight"
ADD_DANGER_ZONE = "add-danger-zone"
ADD_ARROW = "add-arrow"
ADD_INCIDENT = "add-incident"
ADD_RESTRICTED_ZONE = "add-restricted-zone"
CLEAR_ANNOTATIONS = "clear-annotations"
REMOVE_ANNOTATION = "remove-annotation"
CAMERA_POSITION = "camera-position"
REQUEST_PLACEMENT = "request-placement"
PLACEMENT_POSITION = "placement-position"

# Outbound (server -> client)
MOVEMENT_UPDATE = "movement-update"
TOUCH_MOVEMENT_UPDATE = "touch-movement-update"
FLASHLIGHT_TOGGLE = "flashlight-toggle"
ANNOTATION_ADDED = "annotation-added"
ANNOTATIONS_CLEARED = "annotations-cleared"
ANNOTATION_REMOVED = "annotation-removed"
CAMERA_POSITION_UPDATE = "camera-position-update"
GET_PLACEMENT_POSITION = "get-placement-position"
PLACEMENT_POSITION_RESPONSE = "placement-position-response"

# Lifecycle notifications
CONTROLLER_CONNECTED = "controller-connected"
CONTROLLER_DISCONNECTED = "controller-disconnected"
DISPLAY_DISCONNECTED = "display-disconnected"
