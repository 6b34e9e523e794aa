"""Static metadata describing ExamTrainer."""

APP_NAME = "ExamTrainer"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "ExamTrainer prepares students for the dog handler licence theory exam. "
    "Students log in with an access code in the browser; this console manages "
    "the question bank, the access codes and the study guide."
)

HELP_TEXT = (
    "Questions can be created one by one, generated with AI or imported from a CSV file "
    "exported from a spreadsheet. The importer reads these columns (',' or ';' separated):\n\n"
    "Frage;Antwort 1;Antwort 1 korrekt;Antwort 2;Antwort 2 korrekt;…;Kategorie;Fragetyp\n\n"
    "Mark correct answers with 'richtig'. Fragetyp starting with 'Single' creates a single "
    "choice question, everything else a multiple choice question. Up to eight answers are read. "
    "Rows without question, answers or a correct answer are skipped."
)
