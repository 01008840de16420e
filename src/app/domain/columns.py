"""Nomes de colunas e valores do store de mensagens (tabela ``pdu``)."""

from __future__ import annotations

TABLE_PDU = "pdu"

ID = "_id"
CONTENT_LOCATION = "content_location"
LOCKED = "locked"
MESSAGE_ID = "message_id"
MESSAGE_TYPE = "message_type"
TRANSACTION_ID = "transaction_id"
MSG_BOX = "msg_box"
THREAD_ID = "thread_id"
STATUS = "status"
DATE = "date"
RETRY_INDEX = "retry_index"
DUE_TIME = "due_time"
FROM_ADDRESS = "from_address"
SUBJECT = "subject"
CONTENT_TYPE = "content_type"
PARTS = "parts"

# msg_box
MESSAGE_BOX_INBOX = 1
MESSAGE_BOX_SENT = 2
MESSAGE_BOX_DRAFTS = 3
MESSAGE_BOX_OUTBOX = 4

# status de download da M-Notification.ind
STATE_UNSTARTED = 0x80
STATE_DOWNLOADING = 0x81
STATE_TRANSIENT_FAILURE = 0x82
STATE_PERMANENT_FAILURE = 0x87
