"""
Motion-JPEG AVI muxer package.

Pure Python RIFF/AVI writing for a single MJPEG video stream:

- byte_codec: Little-endian fixed-width integer fields via explicit byte swap
- avi_chunks: Header records (RIFF/hdrl, avih, strl, strh, strf, JUNK, movi)
- avi_index: idx1 index accumulation and serialization
- avi_writer: Two-pass streaming writer (forward pass + in-place header patch)
- frame_source: JPEG bytes / pixel frame normalization
- jpeg_encoder: PyAV-based pixel to JPEG encoder
"""
