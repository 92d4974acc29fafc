"""
Socket.IO event names.
"""


class C2SEvent:
    """Client → relay."""
    REGISTER = "register"
    SEND_PRIVATE_MESSAGE = "send_private_message"
    TYPING = "typing"
    MARK_READ = "mark_read"
    CALL_USER = "call_user"
    ANSWER_CALL = "answer_call"
    ICE_CANDIDATE = "ice_candidate"
    END_CALL = "end_call"


class S2CEvent:
    """Relay → client."""
    RECEIVE_PRIVATE_MESSAGE = "receive_private_message"
    TYPING_STATUS = "typing_status"
    MESSAGES_READ = "messages_read"
    USER_STATUS = "user_status"
    INCOMING_CALL = "incoming_call"
    CALL_ACCEPTED = "call_accepted"
    ICE_CANDIDATE = "ice_candidate"
    CALL_ENDED = "call_ended"


class PresenceStatus:
    ONLINE = "online"
    OFFLINE = "offline"


class CallType:
    AUDIO = "audio"
    VIDEO = "video"
