from .aligner import EdgeAligner


class EdgeMatching:
    def __init__(self, config):
        self.config = config
        self.aligner = None
        self.summary = None

    def create_alignment(self):
        # initialization
        self.aligner = EdgeAligner(self.config)
        # progress
        self.summary = self.aligner.create_alignments()
        return self.summary
