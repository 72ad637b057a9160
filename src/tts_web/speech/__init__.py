"""
Speech Parameters and Remote Client.

    - options.py: Allowed voices/models/formats/suffix types and defaults
    - suffix.py: Uniqueness suffixes and output path composition
    - client.py: SpeechClient interface and the OpenAI implementation
"""
