"""ZMTP protocol pieces: greeting, frame codec and command frames."""