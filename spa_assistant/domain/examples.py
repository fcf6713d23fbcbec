"""Domain layer: labelled example phrases for the similarity classifier."""
from typing import Dict, List

from spa_assistant.domain.intents import IntentType

TRAINING_EXAMPLES: Dict[str, List[str]] = {
    "book_appointment": [
        "i want to book an appointment",
        "schedule a massage for tomorrow",
        "can i get a new booking",
        "set up a facial session",
        "i need to make an appointment for a client",
        "book a combo for next week",
        "new client wants to come in",
    ],
    "add_expense": [
        "i want to add an expense",
        "log a new expense",
        "record a purchase for supplies",
        "enter a bill we paid",
        "track a new cost",
        "i bought supplies this morning",
    ],
    "change_appointment": [
        "i need to change an appointment",
        "switch the service to a massage",
        "modify a booking",
        "the client wants a facial instead",
        "update the service type for a client",
        "change the treatment for an appointment",
    ],
    "change_expense": [
        "i need to change an expense",
        "fix the amount on an expense",
        "the expense amount is wrong",
        "adjust a cost we logged",
        "update the price of an expense",
    ],
    "show_appointments": [
        "what appointments do i have today",
        "show me the schedule",
        "who is coming in tomorrow",
        "what does my day look like",
        "list all bookings for this week",
        "am i busy today",
        "open the calendar",
    ],
    "cancel_appointment": [
        "i need to cancel an appointment",
        "the client can't make it",
        "call off a booking",
        "a client cancelled on me",
        "remove a session from the schedule",
        "the client is not coming",
    ],
    "delete_expense": [
        "i need to delete an expense",
        "remove an expense",
        "get rid of a cost i logged by mistake",
        "erase a duplicate expense",
        "that expense should not be there",
    ],
    "complete_appointment": [
        "i need to complete an appointment",
        "mark a session as done",
        "the client just finished",
        "close out an appointment",
        "the massage is finished",
        "finish up a booking with a tip",
    ],
    "help_general": [
        "what can you help me with",
        "what are your capabilities",
        "i need some help",
        "show me what you can do",
        "what commands do you understand",
    ],
    "how_to_general": [
        "how do i use this",
        "how does cancelling work",
        "how can i get started",
        "what is the right way to ask you something",
        "how should i phrase a request",
    ],
}

CATEGORY_TYPES: Dict[str, str] = {
    "book_appointment": IntentType.BOOK_APPOINTMENT,
    "add_expense": IntentType.ADD_EXPENSE,
    "change_appointment": IntentType.EDIT,
    "change_expense": IntentType.EDIT_EXPENSE,
    "show_appointments": IntentType.SHOW_APPOINTMENTS,
    "cancel_appointment": IntentType.CANCEL,
    "delete_expense": IntentType.DELETE_EXPENSE,
    "complete_appointment": IntentType.COMPLETE,
    "help_general": IntentType.HELP_GENERAL,
    "how_to_general": IntentType.HOW_TO_GENERAL,
}

CATEGORY_PRIORITIES: Dict[str, int] = {
    "book_appointment": 1,
    "add_expense": 1,
    "change_appointment": 2,
    "change_expense": 2,
    "show_appointments": 3,
    "cancel_appointment": 4,
    "delete_expense": 4,
    "complete_appointment": 5,
    "help_general": 10,
    "how_to_general": 10,
}

DEFAULT_PRIORITY = 5
