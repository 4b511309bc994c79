CHUNK = "chunk"
EXTRACTION = "extraction"
STEP_UPDATE = "step_update"
ERROR = "error"
DONE = "done"
